import argparse
import asyncio
import logging
import sys
import time

from pydantic import ValidationError

from depstats.models import SortKey
from depstats.pipeline import PipelineConfig, run_with_deadline
from depstats.service import GitHubConfig, GitHubService


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="depstats",
        description="Report GitHub metadata for the dependencies listed in a go.mod file.",
    )
    parser.add_argument(
        "--sort",
        type=SortKey,
        choices=list(SortKey),
        default=SortKey.WATCHERS,
        metavar="{" + ",".join(key.value for key in SortKey) + "}",
        help="Column to sort the report by (default: watchers).",
    )
    parser.add_argument(
        "--manifest",
        default="go.mod",
        help="Path to the module manifest (default: go.mod).",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of concurrent repository lookups.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    return parser


async def main(
    github_config: GitHubConfig, pipeline_config: PipelineConfig, args: argparse.Namespace
) -> int:
    try:
        manifest = open(args.manifest, encoding="utf-8", errors="replace")
    except OSError as e:
        logging.error(f"Unable to open manifest {args.manifest}: {e}")
        return 1

    with manifest:
        print(f"Scanning {args.manifest} file...")
        service = await GitHubService.create(github_config)
        try:
            table = await run_with_deadline(manifest, service, args.sort, pipeline_config)
        except asyncio.TimeoutError:
            logging.error(f"Deadline of {pipeline_config.deadline}s exceeded, exiting...")
            return 1
        finally:
            await service.close()

    sys.stdout.write(table)
    sys.stdout.flush()
    return 0


def cli(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        github_config = GitHubConfig()
    except ValidationError as e:
        if any(error["loc"] == ("token",) for error in e.errors()):
            print("GitHub token not found, exiting...")
        else:
            logging.error(f"Invalid GitHub configuration: {e}")
        return 1
    print("GitHub token found, proceeding...")

    overrides = {"workers": args.workers} if args.workers is not None else {}
    try:
        pipeline_config = PipelineConfig(**overrides)
    except ValidationError as e:
        logging.error(f"Invalid pipeline configuration: {e}")
        return 1

    logging.info("Starting...")
    start_time = time.time()
    status = asyncio.run(main(github_config, pipeline_config, args))
    logging.info(f"Execution time: {time.time() - start_time:.2f}s")
    return status


if __name__ == "__main__":
    sys.exit(cli())
