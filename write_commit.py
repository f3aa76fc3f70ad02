#!/usr/bin/env python3
"""
Script to generate a commit message for the staged changes of a repository:
- Repository path (optional, defaults to the current directory)
- Sampling parameters for the model (temperature, top-p, penalties)
- --dry-run: Print the message without committing
"""

import argparse
import asyncio
import sys
from pathlib import Path

from commit_scribe.config import Settings, default_model_for
from commit_scribe.git.domain.value_objects import SegmentBudget
from commit_scribe.git.repositories.implementations import GitRepositoryImpl
from commit_scribe.git.services.git_service import GitService
from commit_scribe.git.services.token_estimator import create_token_estimator
from commit_scribe.logging_config import configure_logging
from commit_scribe.summarization.domain.exceptions import MissingApiKeyError
from commit_scribe.summarization.domain.value_objects import GenerationParameters, PromptNames
from commit_scribe.summarization.repositories.factory import create_generator
from commit_scribe.summarization.repositories.prompt_repository import FilePromptRepository
from commit_scribe.summarization.services.summarization_service import SummarizationService


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        description="Generate AI-powered commit messages for staged changes"
    )
    parser.add_argument(
        "repo_path",
        type=Path,
        nargs="?",
        default=Path("."),
        help="Path to the git repository directory (default: current directory)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Generate commit message without committing",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Show detailed output",
    )
    parser.add_argument(
        "--pattern",
        type=str,
        default=PromptNames.COMMIT,
        help=f"Prompt used to write the commit message (default: {PromptNames.COMMIT})",
    )
    parser.add_argument(
        "--temperature",
        type=float,
        default=1.0,
        help="Temperature setting for AI model (0-2, default: 1)",
    )
    parser.add_argument(
        "--topp",
        type=float,
        default=1.0,
        help="Top-p setting for AI model (0-1, default: 1)",
    )
    parser.add_argument(
        "--presence",
        type=float,
        default=0.0,
        help="Presence penalty for AI model (default: 0)",
    )
    parser.add_argument(
        "--frequency",
        type=float,
        default=0.0,
        help="Frequency penalty for AI model (default: 0)",
    )
    parser.add_argument(
        "--model",
        type=str,
        default=None,
        help="AI model to use (default: from environment, gpt-4o-mini for OpenAI)",
    )
    parser.add_argument(
        "--provider",
        type=str,
        default=None,
        help="Generation backend: openai, anthropic or fabric (default: LLM_PROVIDER)",
    )
    parser.add_argument(
        "--max-segment-tokens",
        type=int,
        default=None,
        help="Largest diff sent in a single call before splitting (default: 3000)",
    )
    parser.add_argument(
        "--target-segment-tokens",
        type=int,
        default=None,
        help="Target size of a split segment (default: 2500)",
    )
    parser.add_argument(
        "--combine-budget",
        type=int,
        default=None,
        help="Token budget of the call combining segment summaries (default: 128000)",
    )
    parser.add_argument(
        "--max-concurrency",
        type=int,
        default=None,
        help="Maximum number of segments summarized at once (default: unbounded)",
    )
    parser.add_argument(
        "--prompts-dir",
        type=Path,
        default=None,
        help="Directory with custom prompt templates (<prompt>/system.md)",
    )
    parser.add_argument(
        "--precise-tokens",
        action="store_true",
        help="Count tokens with tiktoken instead of the length heuristic",
    )
    return parser


def build_summarization_service(
    args: argparse.Namespace, settings: Settings, provider: str, model: str
) -> SummarizationService:
    """Wire the summarization service from arguments and settings."""
    prompt_repository = FilePromptRepository(args.prompts_dir or settings.prompts_dir)
    generator = create_generator(
        provider, prompt_repository, fabric_timeout=settings.fabric_timeout
    )
    token_estimator = create_token_estimator(
        precise=args.precise_tokens or settings.precise_tokens, model=model
    )
    segment_budget = SegmentBudget(
        max_tokens_per_segment=args.max_segment_tokens or settings.max_segment_tokens,
        target_tokens_per_segment=args.target_segment_tokens or settings.target_segment_tokens,
    )
    return SummarizationService(
        generator,
        prompt_repository=prompt_repository,
        token_estimator=token_estimator,
        segment_budget=segment_budget,
        combine_budget=args.combine_budget or settings.combine_budget,
        max_concurrency=args.max_concurrency or settings.max_concurrency,
        commit_prompt_id=args.pattern,
    )


def main() -> None:
    """Main function to parse arguments, generate the message and commit."""
    args = build_parser().parse_args()
    configure_logging(verbose=args.verbose)

    git_service = GitService(GitRepositoryImpl())
    repo_path = args.repo_path

    if not repo_path.is_dir() or not git_service.is_git_repository(repo_path):
        print(
            f"✗ Not in a git repository: {repo_path}. "
            "Please run this command from within a git repository.",
            file=sys.stderr,
        )
        sys.exit(1)

    try:
        settings = Settings.from_env()
        provider = (args.provider or settings.provider).lower()
        if args.model:
            model = args.model
        elif args.provider:
            model = default_model_for(provider)
        else:
            model = settings.model

        staged_diff = git_service.get_staged_diff(repo_path)
        if not staged_diff.strip():
            print("No staged changes found. Please stage your changes first using 'git add'.")
            sys.exit(0)

        if args.verbose:
            print("📝 Staged changes detected. Analyzing and generating commit message...")

        summarization_service = build_summarization_service(args, settings, provider, model)
        parameters = GenerationParameters(
            model=model,
            temperature=args.temperature,
            top_p=args.topp,
            presence_penalty=args.presence,
            frequency_penalty=args.frequency,
        )

        commit_message = asyncio.run(
            summarization_service.summarize_diff(staged_diff, parameters)
        )

        print("Generated commit message:")
        print("=" * 80)
        print(commit_message)
        print("=" * 80)

        if args.dry_run:
            print("\nDry run mode - not committing changes.")
            sys.exit(0)

        git_service.commit_changes(repo_path, commit_message)
        print("\n✓ Changes committed successfully!")
        sys.exit(0)

    except MissingApiKeyError as e:
        print(f"✗ Configuration error: {e}", file=sys.stderr)
        print(
            "  Hint: Set OPENAI_API_KEY or ANTHROPIC_API_KEY in .env file or environment",
            file=sys.stderr,
        )
        sys.exit(1)
    except ValueError as e:
        print(f"✗ Configuration error: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"✗ Failed to generate commit message: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
