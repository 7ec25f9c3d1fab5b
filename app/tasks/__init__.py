from app.tasks.scheduler import start_scheduler, shutdown_scheduler, record_daily_performance

__all__ = ["start_scheduler", "shutdown_scheduler", "record_daily_performance"]
