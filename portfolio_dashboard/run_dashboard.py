"""Run the Streamlit portfolio dashboard."""
import argparse
import os
import subprocess
import sys
from typing import List, Optional

ENV_OPTIONS = {
    "holdings": "PORTFOLIO_HOLDINGS",
    "poll_seconds": "DASHBOARD_POLL_SECONDS",
    "history_days": "DASHBOARD_HISTORY_DAYS",
    "log_level": "DASHBOARD_LOG_LEVEL",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="portfolio-dashboard",
        description="Launch the portfolio dashboard. Unknown options are passed to `streamlit run`.",
    )
    parser.add_argument("--holdings", help='Holdings override, e.g. "AAPL:10,MSFT:5"')
    parser.add_argument("--poll-seconds", type=float, help="Seconds between market data refreshes")
    parser.add_argument("--history-days", type=int, help="Days of daily history to chart")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


def build_environment(args: argparse.Namespace, base: Optional[dict] = None) -> dict:
    env = dict(os.environ if base is None else base)
    for attr, name in ENV_OPTIONS.items():
        value = getattr(args, attr)
        if value is not None:
            env[name] = str(value)
    return env


def main(argv: Optional[List[str]] = None) -> int:
    args, streamlit_args = build_parser().parse_known_args(argv)
    app_path = os.path.join(os.path.dirname(__file__), "app.py")
    return subprocess.call(
        [sys.executable, "-m", "streamlit", "run", app_path, *streamlit_args],
        env=build_environment(args),
    )


if __name__ == "__main__":
    raise SystemExit(main())
