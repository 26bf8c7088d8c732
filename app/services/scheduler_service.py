"""
Football Bets Background Scheduler Service

Keeps game statuses moving and competition winners in sync using APScheduler.
"""

import atexit
import logging
import time
from datetime import datetime, timezone

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from app import db
from app.services.competition_store import CompetitionStore
from app.services.game_status import update_game_statuses
from app.services.winner_service import refresh_all_winners

logger = logging.getLogger(__name__)


class SchedulerService:
    """Manages background jobs for game status updates and winner reconciliation"""

    def __init__(self, app=None):
        self.scheduler = None
        self.app = app
        self.is_running = False
        self.job_stats = {
            "last_run": None,
            "total_runs": 0,
            "successful_runs": 0,
            "failed_runs": 0,
            "last_error": None,
            "games_finished": 0,
            "winners_changed": 0,
        }

        if app:
            self.init_app(app)

    def init_app(self, app):
        """Initialize scheduler with Flask app"""
        self.app = app
        self.scheduler = BackgroundScheduler(daemon=True, timezone="UTC")

        # Register shutdown
        atexit.register(self.shutdown)

        # Start scheduler if enabled
        if app.config.get("SCHEDULER_ENABLED", True):
            self.start()

    def start(self):
        """Start the background scheduler"""
        if self.is_running:
            return

        try:
            # Clear any existing jobs
            self.scheduler.remove_all_jobs()

            self._add_core_jobs()

            self.scheduler.start()
            self.is_running = True

            logger.info("Scheduler started successfully")

        except Exception as e:
            logger.error(f"Failed to start scheduler: {e}")
            raise

    def stop(self):
        """Stop the background scheduler"""
        if not self.is_running:
            return

        self.scheduler.shutdown(wait=False)
        self.is_running = False
        logger.info("Scheduler stopped")

    def shutdown(self):
        """Graceful shutdown"""
        self.stop()

    def run_forever(self, poll_seconds=1):
        """Block the calling thread while the scheduler works"""
        try:
            while self.is_running:
                time.sleep(poll_seconds)
        except (KeyboardInterrupt, SystemExit):
            logger.info("Scheduler interrupted")
        finally:
            self.shutdown()

    def _add_core_jobs(self):
        """Add core scheduled jobs"""
        interval = self.app.config.get("STATUS_UPDATE_INTERVAL_SECONDS", 60)
        reconcile_hour = self.app.config.get("WINNER_RECONCILE_HOUR", 3)

        self.scheduler.add_job(
            func=self._update_game_statuses,
            trigger=IntervalTrigger(seconds=interval),
            id="update_game_statuses",
            name="Update Game Statuses",
            max_instances=1,
            coalesce=True,
            misfire_grace_time=30,
        )

        # Daily safety net for winners changed outside the normal flow
        self.scheduler.add_job(
            func=self._reconcile_winners,
            trigger=CronTrigger(hour=reconcile_hour, minute=0),
            id="reconcile_winners",
            name="Reconcile Competition Winners",
            max_instances=1,
            coalesce=True,
            misfire_grace_time=3600,
        )

        logger.info("Core scheduled jobs added")

    def _update_game_statuses(self):
        """Advance game statuses and settle finished games"""
        with self.app.app_context():
            try:
                summary = update_game_statuses(db.session)
                self._update_stats(True, games_finished=len(summary["finished"]))
            except Exception as e:
                db.session.rollback()
                self._update_stats(False)
                self.job_stats["last_error"] = str(e)
                logger.error(f"Error updating game statuses: {e}", exc_info=True)

    def _reconcile_winners(self):
        """Recompute every competition winner"""
        with self.app.app_context():
            try:
                logger.info("Reconciling competition winners...")
                results = refresh_all_winners(CompetitionStore(db.session))
                changed = sum(1 for result in results if result.changed)
                self._update_stats(True, winners_changed=changed)
            except Exception as e:
                db.session.rollback()
                self._update_stats(False)
                self.job_stats["last_error"] = str(e)
                logger.error(f"Error reconciling winners: {e}", exc_info=True)

    def _update_stats(self, success, games_finished=0, winners_changed=0):
        """Update job statistics"""
        self.job_stats["last_run"] = datetime.now(timezone.utc)
        self.job_stats["total_runs"] += 1

        if success:
            self.job_stats["successful_runs"] += 1
            self.job_stats["games_finished"] += games_finished
            self.job_stats["winners_changed"] += winners_changed
            self.job_stats["last_error"] = None
        else:
            self.job_stats["failed_runs"] += 1

    def get_status(self):
        """Get scheduler status information"""
        jobs = []
        if self.scheduler:
            for job in self.scheduler.get_jobs():
                next_run = getattr(job, "next_run_time", None)
                jobs.append(
                    {
                        "id": job.id,
                        "name": job.name,
                        "next_run": next_run.isoformat() if next_run else None,
                        "trigger": str(job.trigger),
                    }
                )

        return {"is_running": self.is_running, "jobs": jobs, "stats": self.job_stats}

    def force_run(self, job_type="status"):
        """Manually trigger a job"""
        if job_type == "status":
            self._update_game_statuses()
        elif job_type == "winners":
            self._reconcile_winners()
        else:
            raise ValueError(f"Unknown job type: {job_type}")

        return self.job_stats["last_error"] is None, f"Manual {job_type} run completed"


# Global scheduler instance
scheduler_service = SchedulerService()
