import datetime
import logging

from db import ProgramRepository, WorkoutRepository, WorkoutRowRepository, LogRepository

logger = logging.getLogger(__name__)

DEMO_USER = "demo-user"


def seed(db_path: str = "workout.db", user_id: str = DEMO_USER) -> bool:
    """Insert the sample strength program and a few anchor logs.

    Returns ``False`` when the database already holds programs.
    """
    programs = ProgramRepository(db_path)
    if programs.fetch_all_programs():
        logger.info("Database already contains programs")
        return False

    workouts = WorkoutRepository(db_path)
    rows = WorkoutRowRepository(db_path)
    logs = LogRepository(db_path)

    pid = programs.create(
        "Krank 6-Week Strength", "Focus on Squat, Bench, Deadlift anchors."
    )
    lower = workouts.create(pid, "Week 1 - Lower Body", 1, "Deadlift focus")
    deadlift = rows.add(
        lower, "1a", "Deadlift", "1", "3",
        intensity_value="6", rest="3-5 min", is_anchor=True, movement_family="Deadlift",
    )
    rows.add(
        lower, "1b", "Pause Deadlift", "4", "4",
        variant="-15%", intensity_value="4", rest="1 min", movement_family="Deadlift",
    )
    upper = workouts.create(pid, "Week 1 - Upper Body", 2, "Bench focus")
    bench = rows.add(
        upper, "2a", "Bench Press", "1", "5",
        intensity_value="6", rest="3 min", is_anchor=True, movement_family="Bench",
    )
    rows.add(
        upper, "2b", "Larsen Press", "4", "6",
        variant="-12%", rest="1 min", movement_family="Bench",
    )

    today = datetime.datetime.now(datetime.timezone.utc).replace(
        hour=12, minute=0, second=0, microsecond=0
    )
    for weeks_ago, (dl_weight, bp_weight) in zip((2, 1, 0), ((315, 205), (325, 210), (335, 215))):
        stamp = (today - datetime.timedelta(weeks=weeks_ago)).isoformat()
        logs.add(user_id, deadlift, dl_weight, 3, 6, date=stamp)
        logs.add(user_id, bench, bp_weight, 5, 7, date=stamp)
    logger.info("Seed data inserted for %s", user_id)
    return True


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    seed()
