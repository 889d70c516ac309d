"""Entry point for ftcsim package."""

import argparse
import logging
from typing import Optional

from ftcsim.simulation import (
    Alliance,
    Button,
    DriveMode,
    EventType,
    InputFrame,
    Orchestrator,
    SimulationConfig,
    Vec2,
)

DEMO_DT = 1 / 60
ARRIVE_RADIUS = 2.0
SLOW_RADIUS = 20.0
PHASE_TIMEOUT = 8.0
SHOOTING_SPOT = {Alliance.BLUE: Vec2(40.0, 40.0), Alliance.RED: Vec2(104.0, 40.0)}


def _command_toward(orch: Orchestrator, target: Vec2, buttons=()) -> tuple[InputFrame, bool]:
    """Field-centric stick command that drives the primary robot to ``target``."""
    delta = target - orch.robot.pos
    dist = delta.length()
    if dist < ARRIVE_RADIUS:
        return InputFrame(buttons=frozenset(buttons)), True

    world = delta.normalized() * min(1.0, dist / SLOW_RADIUS)
    sign = 1.0 if orch.alliance == Alliance.BLUE else -1.0
    frame = InputFrame(
        strafe=sign * world.y,
        forward=sign * world.x,
        buttons=frozenset(buttons),
    )
    return frame, False


def _run_phase(orch: Orchestrator, command, done) -> None:
    """Step until ``done()`` or the phase times out."""
    elapsed = 0.0
    while elapsed < PHASE_TIMEOUT and orch.is_running and not done():
        orch.set_input(0, command())
        elapsed += orch.step(DEMO_DT).dt


def run_demo(alliance: Alliance, seed: int) -> Orchestrator:
    """Collect three samples, drive to a shooting spot and empty the robot."""
    orch = Orchestrator(SimulationConfig(seed=seed, drive_mode=DriveMode.FIELD))
    orch.start_match(alliance)
    robot = orch.robot

    def toward_nearest_sample() -> InputFrame:
        sample = orch.match.nearest_sample(robot.pos, radius=float("inf"))
        if sample is None:
            return InputFrame.neutral()
        return _command_toward(orch, sample.pos, buttons=(Button.ACTION,))[0]

    _run_phase(orch, toward_nearest_sample, lambda: robot.is_full)

    orch.set_input(0, InputFrame(buttons=frozenset({Button.ARM})))
    orch.step(DEMO_DT)

    spot = SHOOTING_SPOT[orch.alliance]
    _run_phase(
        orch,
        lambda: _command_toward(orch, spot)[0],
        lambda: robot.pos.distance_to(spot) < ARRIVE_RADIUS,
    )
    _run_phase(
        orch,
        lambda: InputFrame(buttons=frozenset({Button.ACTION})),
        lambda: not robot.held_samples,
    )
    _run_phase(orch, InputFrame.neutral, lambda: not orch.match.launched)

    orch.stop_match()
    return orch


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point for the ftcsim application."""
    parser = argparse.ArgumentParser(
        description="ftcsim - Robotics Match Simulator",
        prog="ftcsim",
    )
    parser.add_argument(
        "--demo",
        action="store_true",
        help="Run a scripted headless match",
    )
    parser.add_argument(
        "--sweep",
        action="store_true",
        help="Print empirical vs expected shot accuracy by distance",
    )
    parser.add_argument(
        "--serve",
        action="store_true",
        help="Run the match API server",
    )
    parser.add_argument(
        "--alliance",
        choices=[a.value for a in Alliance],
        default="blue",
        help="Alliance for the demo match (default: blue)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=7,
        help="Random seed for the demo and sweep (default: 7)",
    )
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
    )

    if args.demo:
        print("ftcsim - Robotics Match Simulator (Demo Mode)")
        print("=" * 50)

        orch = run_demo(Alliance(args.alliance), args.seed)

        shown = {EventType.PICKUP, EventType.LAUNCH, EventType.SCORE, EventType.MISS}
        for event in orch.event_bus.history:
            if event.type in shown:
                print(event)

        counts = orch.item_counts()
        print()
        print(f"Final Score: {orch.match.score} ({orch.clock.format_time()})")
        print(f"Samples: {counts.on_field} on field, {counts.held} held, {counts.in_flight} in flight")
    elif args.sweep:
        from ftcsim.simulation.testing import format_sweep, shot_sweep

        rows = shot_sweep([0, 25, 50, 75, 100, 125, 150, 175, 203.6], shots_per_distance=2000, seed=args.seed)
        print(format_sweep(rows))
    elif args.serve:
        from ftcsim.api.main import run_api

        run_api(host=args.host, port=args.port)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
