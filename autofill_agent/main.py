"""Command-line entry point for the autofill agent."""

import argparse
import asyncio
import json
import logging
import os
import sys
from datetime import datetime
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from autofill_agent.config import Config
from autofill_agent.core.browser_manager import BrowserManager
from autofill_agent.core.diagnostics_manager import DiagnosticsManager
from autofill_agent.core.exceptions import AutofillError
from autofill_agent.core.orchestrator import AutofillOrchestrator
from autofill_agent.core.platform_detector import MULTI_STEP
from autofill_agent.core.models import Profile
from autofill_agent.tools.resume_parser import ResumeParser
from autofill_agent.utils.profile_data import FileDocumentStore, ProfileManager

logger = logging.getLogger(__name__)


def resolve_profile_path(explicit_path: Optional[str], config: Config) -> Optional[str]:
    """Pick the profile file: the explicit path, then AUTOFILL_PROFILE, then the configured default if it exists."""
    path = explicit_path or os.getenv("AUTOFILL_PROFILE")
    if path:
        return path
    default_path = config.get("profiles.default_profile")
    if default_path and os.path.exists(os.path.expanduser(default_path)):
        logger.info(f"Using default profile {default_path}")
        return default_path
    return None


def load_profile(profile_path: Optional[str], resume_path: Optional[str]) -> Profile:
    """Load the applicant profile and attach a resume document if one was given."""
    if profile_path:
        profile = ProfileManager(profile_path).load()
    else:
        logger.warning("No profile given, only the resume will be uploaded")
        profile = Profile()
    if resume_path:
        profile.resume = FileDocumentStore().fetch(resume_path)
    return profile


def parse_resume_text(path: str, save_to: Optional[str] = None) -> Dict[str, Any]:
    """Parse a plain-text resume into profile fields, optionally saving them as a profile file."""
    with open(os.path.expanduser(path), 'r', encoding='utf-8') as f:
        text = f.read()
    profile = ResumeParser().parse(text)
    if save_to and not ProfileManager(save_to).save(profile):
        raise AutofillError(f"Could not save parsed profile to {save_to}")
    data = profile.to_dict()
    data.pop('resume', None)
    return data


async def autofill_page(
    url: str,
    profile: Profile,
    config: Config,
    visible: bool = False,
    watch: Optional[float] = None,
    output_dir: Optional[str] = None,
) -> Dict[str, Any]:
    """Open a page, autofill it and optionally keep re-filling after navigation.

    Args:
        url: URL of the application form
        profile: Applicant profile
        config: Loaded configuration
        visible: Whether to show the browser window
        watch: Seconds to keep watching for page changes after the first run
        output_dir: Directory for run diagnostics

    Returns:
        Dict with the summary of the first run and of any watcher re-runs
    """
    run_id = datetime.now().strftime("%Y%m%d_%H%M%S")
    diagnostics_manager = DiagnosticsManager(
        run_id=run_id, base_output_dir=output_dir or config.get_storage_path("results"))
    browser_manager = BrowserManager(
        visible=visible, options=config.get_browser_options(), diagnostics_manager=diagnostics_manager)

    results: Dict[str, Any] = {"run_id": run_id, "url": url}
    try:
        with diagnostics_manager.track_stage("initialization"):
            if not await browser_manager.initialize():
                raise AutofillError("Browser could not be started")
            if not await browser_manager.navigate(url):
                raise AutofillError(f"Could not open {url}")

        orchestrator = AutofillOrchestrator(
            browser_manager.page_adapter(), config=config, diagnostics_manager=diagnostics_manager)
        summary = await orchestrator.run(profile)
        results["summary"] = summary.to_dict()
        if not watch and MULTI_STEP in summary.special_handling:
            logger.info(f"{summary.platform} applications span several pages; use --watch to keep filling after each step")

        if watch:
            watcher = orchestrator.watch_navigation(
                lambda: profile,
                interval=config.get("timing.watch_interval"),
                settle_delay=config.get("timing.watch_settle_delay"),
            )
            async with watcher:
                await asyncio.sleep(watch)
            results["reruns"] = [s.to_dict() for s in watcher.summaries]
    finally:
        await browser_manager.close()
        results["diagnostics"] = diagnostics_manager.get_diagnostics()
        diagnostics_manager.save_intermediate_result("results.json", results)

    return results


def print_summary(summary: Dict[str, Any]):
    print(f"\nPlatform: {summary.get('platform')}")
    if summary.get("special_handling"):
        print(f"  special handling: {', '.join(summary['special_handling'])}")
    for status, count in summary.get("counts", {}).items():
        print(f"  {status}: {count}")
    for outcome in summary.get("outcomes", []):
        suffix = f" ({outcome['reason']})" if outcome.get("reason") else ""
        print(f"  [{outcome['status']}] {outcome['field']}{suffix}")


def main(argv=None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(description="Autofill job application forms from a stored profile.")
    parser.add_argument("url", nargs="?", help="URL of the job application page.")
    parser.add_argument("-p", "--profile", help="Path to the applicant profile JSON or YAML file.")
    parser.add_argument("-r", "--resume", help="Resume file to upload.")
    parser.add_argument("--parse-resume", metavar="TEXT_FILE",
                        help="Parse a plain-text resume and print the extracted profile as JSON (saved to --profile when given).")
    parser.add_argument("--visible", action="store_true", help="Show the browser window.")
    parser.add_argument("--watch", type=float, metavar="SECONDS",
                        help="Keep re-filling after page changes for this many seconds.")
    parser.add_argument("-c", "--config", help="Path to the configuration file.")
    parser.add_argument("--output-dir", help="Directory to save run results.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging.")
    args = parser.parse_args(argv)

    load_dotenv()
    config = Config(args.config or os.getenv("AUTOFILL_CONFIG"))
    config.configure_logging("DEBUG" if args.verbose else None)

    if args.parse_resume:
        try:
            data = parse_resume_text(args.parse_resume, save_to=args.profile)
        except (OSError, AutofillError) as e:
            logger.error(str(e))
            return 1
        print(json.dumps(data, indent=2))
        return 0
    if not args.url:
        parser.error("url is required unless --parse-resume is given")

    try:
        profile = load_profile(resolve_profile_path(args.profile, config), args.resume)
        results = asyncio.run(autofill_page(
            url=args.url,
            profile=profile,
            config=config,
            visible=args.visible,
            watch=args.watch,
            output_dir=args.output_dir,
        ))
    except AutofillError as e:
        logger.error(str(e))
        return 1
    except Exception as e:
        logger.critical(f"Autofill failed with unhandled exception: {e}", exc_info=True)
        return 1

    print_summary(results["summary"])
    for index, rerun in enumerate(results.get("reruns", []), start=1):
        print(f"\nRe-run {index}:")
        print_summary(rerun)
    return 0


def cli():
    sys.exit(main())


if __name__ == "__main__":
    cli()
