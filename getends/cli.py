import argparse
import logging
import sys
from typing import Optional, Sequence

from getends import config as env
from getends.domain.run_profile import RunProfile
from getends.exceptions import OutputWriteError, RunProfileError, TargetListError
from getends.services.target_source import collect_targets

logger = logging.getLogger("getends")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="getends",
        description="Extract in-scope links and script references from web pages.",
    )
    parser.add_argument("-u", dest="url", default="", help="Single URL to fetch")
    parser.add_argument("-l", dest="list_file", default="", help="Text file containing a list of URLs")
    parser.add_argument(
        "-o",
        dest="output",
        default=None,
        help=f"Output file to append extracted URLs to (default: {env.DEFAULT_OUTPUT_FILE})",
    )
    parser.add_argument(
        "-d",
        dest="same_domain",
        action="store_true",
        default=None,
        help="Extract only links on the same domain as the target (or its subdomains)",
    )
    parser.add_argument("-j", dest="js_only", action="store_true", default=None, help="Extract only .js files")
    parser.add_argument(
        "--no-accept",
        dest="no_accept",
        action="store_true",
        default=None,
        help="Do not send the Accept header",
    )
    parser.add_argument("-c", "--config", dest="profile", default=None, help="YAML run profile")
    parser.add_argument("-w", "--workers", type=int, default=None, help="Targets processed in parallel (default: 1)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log rejected links and other debug detail")
    return parser


def configure_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else getattr(logging, env.log_level(), logging.INFO)
    logging.basicConfig(level=level, format="%(levelname)s %(message)s")
    logging.getLogger("getends").setLevel(level)


def _choose(*values):
    for value in values:
        if value is not None:
            return value
    return None


def main(argv: Optional[Sequence[str]] = None, container=None) -> int:
    """Run one extraction pass. Returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if container is None:
        from getends.container import Container
        container = Container()

    profile = RunProfile()
    if args.profile:
        try:
            profile = container.run_profile_loader().load(args.profile)
        except RunProfileError as e:
            logger.error("%s", e)
            return 1

    list_path = args.list_file or profile.target_list
    if not (args.url or list_path or profile.targets):
        parser.print_help(sys.stderr)
        return 1

    try:
        targets = collect_targets(args.url, list_path, profile.targets)
    except TargetListError as e:
        logger.error("Error reading URLs from file: %s", e)
        return 1

    output = _choose(args.output, profile.output, env.DEFAULT_OUTPUT_FILE)
    js_only = _choose(args.js_only, profile.js_only, False)
    no_accept = _choose(args.no_accept, profile.no_accept, False)
    workers = _choose(args.workers, profile.workers, 1)
    if _choose(args.same_domain, profile.same_domain, False):
        logger.debug("Same-domain scope requested; links outside the target domain are always dropped")

    container.config.JS_ONLY.from_value(js_only)
    container.config.SEND_ACCEPT.from_value(not no_accept)
    container.config.WORKERS.from_value(workers)

    extraction_set = container.extraction_set()
    result = container.extraction_executor().run(targets, extraction_set)
    if result.targets_skipped:
        logger.info("%d of %d target(s) skipped", result.targets_skipped, len(targets))

    urls = extraction_set.drain()
    if not urls:
        logger.warning("No URLs extracted. Either no links were found or the filters were too restrictive.")
        return 0

    try:
        container.result_writer(output).append(urls)
    except OutputWriteError as e:
        logger.error("Error writing extracted URLs to file: %s", e)
        return 1

    logger.info("--- [OUTPUT] %d extracted URL(s) written to %s ---", len(urls), output)
    return 0
