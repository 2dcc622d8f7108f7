import argparse
import json
import logging
import os
import shutil

from algorithms import WeightConverter
from db import LogRepository, SettingsRepository
from models import MovementFamily
from seed_sample_data import DEMO_USER, seed
from stats_service import StatisticsService


def _service(db_path: str, yaml_path: str) -> StatisticsService:
    settings = SettingsRepository(db_path, yaml_path)
    return StatisticsService(LogRepository(db_path), settings)


def e1rm_report(
    db_path: str,
    yaml_path: str,
    user_id: str,
    family: str,
    anchor_only: bool = False,
) -> list[dict]:
    stats = _service(db_path, yaml_path)
    return stats.e1rm_series(user_id, family, True if anchor_only else None)


def suggest_report(
    db_path: str,
    yaml_path: str,
    user_id: str,
    family: str,
    reps: float | None = None,
    rpe: float | None = None,
) -> dict:
    stats = _service(db_path, yaml_path)
    return stats.suggestions(user_id, family, reps, rpe)


def backup_db(db_path: str, backup_path: str) -> None:
    shutil.copy(db_path, backup_path)


def restore_db(backup_path: str, db_path: str) -> None:
    shutil.copy(backup_path, db_path)


def demo_data(db_path: str, user_id: str = DEMO_USER) -> None:
    """Populate the database with the sample program if empty."""
    if seed(db_path, user_id):
        print("Demo data inserted")
    else:
        print("Database already contains programs")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Strength estimation utilities")
    sub = parser.add_subparsers(dest="cmd", required=True)
    families = [m.value for m in MovementFamily]

    demo = sub.add_parser("demo")
    demo.add_argument("--db", default="workout.db")
    demo.add_argument("--user", default=DEMO_USER)

    e1rm = sub.add_parser("e1rm")
    e1rm.add_argument("--db", default="workout.db")
    e1rm.add_argument("--yaml", default="settings.yaml")
    e1rm.add_argument("--user", default=DEMO_USER)
    e1rm.add_argument("--family", choices=families, required=True)
    e1rm.add_argument("--anchor-only", action="store_true")

    sug = sub.add_parser("suggest")
    sug.add_argument("--db", default="workout.db")
    sug.add_argument("--yaml", default="settings.yaml")
    sug.add_argument("--user", default=DEMO_USER)
    sug.add_argument("--family", choices=families, required=True)
    sug.add_argument("--reps", type=float)
    sug.add_argument("--rpe", type=float)

    bkp = sub.add_parser("backup")
    bkp.add_argument("--db", default="workout.db")
    bkp.add_argument("--out", default="backup.db")

    rst = sub.add_parser("restore")
    rst.add_argument("--in", dest="src", default="backup.db")
    rst.add_argument("--db", default="workout.db")

    conv = sub.add_parser("convert")
    conv.add_argument("--weight", type=float, required=True)
    conv.add_argument("--unit", choices=["kg", "lb"], required=True)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "WARNING").upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.cmd == "demo":
        demo_data(args.db, args.user)
    elif args.cmd == "e1rm":
        series = e1rm_report(args.db, args.yaml, args.user, args.family, args.anchor_only)
        print(json.dumps(series, indent=2))
    elif args.cmd == "suggest":
        rec = suggest_report(args.db, args.yaml, args.user, args.family, args.reps, args.rpe)
        print(json.dumps(rec, indent=2))
    elif args.cmd == "backup":
        backup_db(args.db, args.out)
    elif args.cmd == "restore":
        restore_db(args.src, args.db)
    elif args.cmd == "convert":
        other = WeightConverter.other_unit(args.unit)
        print(f"{args.weight} {args.unit} = {WeightConverter.convert(args.weight, args.unit)} {other}")


if __name__ == "__main__":
    main()
