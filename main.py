import sys
import json
import argparse
import logging
from typing import List, Optional

# Engine imports
from engine.constants import LOGGING_LEVEL
from engine.dispatch import TOPIC_SIMULATIONS, simulation_type_for
from engine.simulation_manager import SimulationSession

# Tutor
from tutor import TutorClient, TutorRequest, knowledge_hints


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run a chemistry teaching demonstration headless.")
    parser.add_argument("--list", action="store_true", help="List knowledge points and their demonstrations")
    parser.add_argument("--topic", type=str, default=None, help="Knowledge point id, e.g. titration")
    parser.add_argument("--ticks", type=int, default=100, help="Number of ticks to run")
    parser.add_argument("--seed", type=int, default=None, help="Seed for particle demonstrations")
    parser.add_argument("--set", dest="settings", action="append", default=[], metavar="NAME=VALUE",
                        help="Parameter override, repeatable")
    parser.add_argument("--variant", type=str, default=None, help="Variant option, e.g. methyl-orange")
    parser.add_argument("--png", type=str, default=None, help="Save the final frame to this PNG")
    parser.add_argument("--json", type=str, default=None, help="Write the tick history to this JSON file")
    parser.add_argument("--ask", type=str, default=None, help="Ask the AI tutor a question about the topic")
    parser.add_argument("--hints", action="store_true", help="Print study hints for the topic")
    parser.add_argument("--api-key", type=str, default=None, help="Tutor API key (default: $CHEMLAB_API_KEY)")
    parser.add_argument("--log-level", type=str, default=LOGGING_LEVEL, help="Logging level")
    return parser


def parse_setting(text: str):
    name, sep, value = text.partition("=")
    if not sep or not name:
        raise ValueError(f"Expected NAME=VALUE, got '{text}'")
    return name.strip(), float(value)


def run_topic(args) -> int:
    session = SimulationSession.for_topic(args.topic, seed=args.seed)
    try:
        if args.variant:
            session.select_variant(args.variant)
        for text in args.settings:
            name, value = parse_setting(text)
            stored = session.set_parameter(name, value)
            print(f"[INFO] {name} = {stored:g}")
    except (KeyError, ValueError) as e:
        print(f"[ERROR] {e}")
        return 2

    session.advance(args.ticks)
    if session.last_error is not None:
        print(f"[ERROR] Simulation failed: {session.last_error!r}")
        return 1

    latest = session.latest
    print(f"[INFO] {args.topic} -> {session.tag}: {session.tick_index} ticks")
    if latest is not None:
        for k, v in latest.outputs.items():
            print(f"  {k:>20s} = {v:.4g}")

    if args.json:
        with open(args.json, "w", encoding="utf-8") as fh:
            json.dump([s.to_dict() for s in session.history], fh, indent=2)
        print(f"[INFO] History saved to {args.json}")

    if args.png:
        # only the PNG path needs matplotlib
        import matplotlib
        matplotlib.use("Agg")
        from visual.renderer import save_snapshot
        save_snapshot(session, args.png)
        print(f"[INFO] Frame saved to {args.png}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, str(args.log_level).upper(), logging.INFO),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if args.list:
        for topic in sorted(TOPIC_SIMULATIONS):
            print(f"{topic:<26s} {simulation_type_for(topic)}")
        return 0

    if not args.topic:
        print("[ERROR] --topic is required (see --list)")
        return 2

    code = run_topic(args)
    if code != 0:
        return code

    if args.hints:
        for hint in knowledge_hints(args.topic):
            print(f"  - {hint}")

    if args.ask:
        client = TutorClient(api_key=args.api_key)
        resp = client.ask(TutorRequest(args.ask, args.topic, context={"ticks": args.ticks}))
        source = "preset" if resp.is_preset else "tutor"
        print(f"[{source}] {resp.answer}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
