import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence

from lane_planner import apply_intent
from lane_planner.logging_utils import summarize_step
from lane_planner.scenario import ScenarioError, describe_stroke, dump_plan, load_scenario

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s:%(name)s:%(message)s",
    )


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Replay road planning intents from a JSON scenario")
    parser.add_argument("path", help="Path to the JSON scenario file")
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--output",
        help="Write the final plan as JSON to the given path",
    )
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    logger.info("Loading scenario from %s", args.path)
    try:
        scenario = load_scenario(Path(args.path))
    except (OSError, ScenarioError) as exc:
        logger.error("Cannot load scenario: %s", exc)
        raise SystemExit(1)

    logger.info(
        "Scenario has %d built stroke(s) and %d intent(s)",
        len(scenario.built_strokes),
        len(scenario.intents),
    )

    step = scenario.initial_step
    for idx, intent in enumerate(scenario.intents):
        step = apply_intent(replace(step, intent=intent), scenario.built_strokes, scenario.settings)
        logger.info("Intent %d (%s) applied", idx, type(intent).__name__)
        print(f"[{idx}] {type(intent).__name__}: {summarize_step(step)}")

    print("New strokes:")
    if step.plan_delta.new_strokes:
        for idx, stroke in enumerate(step.plan_delta.new_strokes):
            print(f"  [{idx}] {describe_stroke(stroke)}")
    else:
        print("  (none)")

    print("Strokes to destroy:")
    if step.plan_delta.strokes_to_destroy:
        for key in step.plan_delta.strokes_to_destroy:
            print(f"  - {key}")
    else:
        print("  (none)")

    print("Selections:")
    if step.selections:
        for ref, (start, end) in step.selections.items():
            print(f"  {ref}: {start:.3f}..{end:.3f}")
    else:
        print("  (none)")

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info("Writing final plan to %s", output_path)
        output_path.write_text(json.dumps(dump_plan(step), indent=2), encoding="utf-8")
        print(f"Plan written to {output_path}")


if __name__ == "__main__":
    main(sys.argv[1:])
