"""Nightly scheduler — streak rewards and a streak evolution sweep.

Usage:
    python -m scheduler.nightly --once      # single run (for cron)
    python -m scheduler.nightly --daemon    # APScheduler loop
"""

from __future__ import annotations

import argparse
import logging
from datetime import datetime

from creature_client import CreatureDataClient
from evolution_engine import EvolutionEngineConfig, EvolutionSession
from evolution_engine.math.activity import current_streak

from scheduler.config import (
    CREATURE_API_URL,
    DATA_DIR,
    NIGHTLY_HOUR,
    NIGHTLY_MINUTE,
    STREAK_REWARD_INTERVAL_DAYS,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def _log_evolution(from_instance, to_instance, reason: str) -> None:
    logger.info("%s evolved into %s: %s", from_instance.name, to_instance.name, reason)


def build_session(config: EvolutionEngineConfig | None = None) -> EvolutionSession:
    config = config or EvolutionEngineConfig.from_env()
    client = CreatureDataClient(base_url=CREATURE_API_URL, timeout_s=config.http_timeout_s)
    return EvolutionSession.from_directory(
        DATA_DIR, client, config=config, listener=_log_evolution
    )


def nightly_job(session: EvolutionSession | None = None) -> int:
    """Execute one nightly cycle. Returns the number of creatures that evolved."""
    logger.info("Starting nightly job")

    # 1. Build the session
    if session is None:
        try:
            session = build_session()
        except Exception as exc:
            logger.error("Failed to set up evolution session: %s", exc)
            return 0

    # 2. Work out today's streak
    workouts = session.workout_store.get_completed_workouts()
    streak = current_streak(
        workouts, datetime.now().date(), session.config.streak_lookback_days
    )
    logger.info("Current streak: %d day(s) from %d completed workouts", streak, len(workouts))
    if streak == 0:
        logger.info("No active streak; nothing to do")
        return 0

    # 3. Streak reward every few days
    if STREAK_REWARD_INTERVAL_DAYS > 0 and streak % STREAK_REWARD_INTERVAL_DAYS == 0:
        reward = session.rewards.grant_streak_reward(streak)
        logger.info("Streak reward: %s", reward.creature.name)

    # 4. Sweep the collection
    before = session.owned_instances()
    before_ids = {i.instance_id for i in before}
    after = session.handle_activity_event("streak", {"streakDays": streak}, before)
    evolved = sum(1 for i in after if i.instance_id not in before_ids)

    logger.info("Nightly job complete: %d of %d creature(s) evolved", evolved, len(before))
    return evolved


def main() -> None:
    parser = argparse.ArgumentParser(description="Workout evolution nightly scheduler")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--once", action="store_true", help="Run once and exit")
    group.add_argument("--daemon", action="store_true", help="Run as APScheduler daemon")
    args = parser.parse_args()

    if args.once:
        nightly_job()
    else:
        from apscheduler.schedulers.blocking import BlockingScheduler

        scheduler = BlockingScheduler()
        scheduler.add_job(
            nightly_job,
            "cron",
            hour=NIGHTLY_HOUR,
            minute=NIGHTLY_MINUTE,
            id="nightly_job",
        )
        logger.info(
            "Scheduler started — nightly job at %02d:%02d",
            NIGHTLY_HOUR,
            NIGHTLY_MINUTE,
        )
        try:
            scheduler.start()
        except (KeyboardInterrupt, SystemExit):
            logger.info("Scheduler stopped")


if __name__ == "__main__":
    main()
