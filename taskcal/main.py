"""Command line entry point.

    taskcal add 2024-03-01 "Standup" --start 09:00 --end 09:30
    taskcal list 2024-03-01 --search stand
    taskcal month 2024 3
    taskcal delete 2024-03-01 <task-id>
    taskcal export --out ./exports
    taskcal serve --port 8790
"""
import argparse
import sys
from dataclasses import replace
from pathlib import Path

from loguru import logger

from .config import settings
from .tasks.errors import TaskCalError
from .tasks.models import Task
from .tasks.service import CalendarService


def setup_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level)


def _format_task(task: Task) -> str:
    line = f"{task.starttime}-{task.endtime}  {task.title}  [{task.id}]"
    if task.description:
        line += f"\n    {task.description}"
    return line


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="taskcal", description="Personal task calendar")
    parser.add_argument("--data-dir", help="Directory holding the saved tasks")
    parser.add_argument("--log-level", help="Log level (DEBUG, INFO, WARNING, ...)")
    sub = parser.add_subparsers(dest="command", required=True)

    p_add = sub.add_parser("add", help="Add a task to a date")
    p_add.add_argument("date", help="YYYY-MM-DD")
    p_add.add_argument("title")
    p_add.add_argument("-d", "--description", default="")
    p_add.add_argument("--start", default="09:00", help="HH:MM")
    p_add.add_argument("--end", default="10:00", help="HH:MM")

    p_delete = sub.add_parser("delete", help="Delete a task")
    p_delete.add_argument("date", help="YYYY-MM-DD")
    p_delete.add_argument("task_id")

    p_list = sub.add_parser("list", help="List tasks on a date")
    p_list.add_argument("date", help="YYYY-MM-DD")
    p_list.add_argument("-s", "--search", default="")

    p_month = sub.add_parser("month", help="List tasks of a month")
    p_month.add_argument("year", type=int)
    p_month.add_argument("month", type=int)
    p_month.add_argument("-s", "--search", default="")

    p_export = sub.add_parser("export", help="Export all tasks as CSV")
    p_export.add_argument("--out", help="Output directory")
    p_export.add_argument("--stdout", action="store_true", help="Print instead of writing a file")

    p_serve = sub.add_parser("serve", help="Run the HTTP API")
    p_serve.add_argument("--host")
    p_serve.add_argument("--port", type=int)

    return parser


def _run(args: argparse.Namespace, service: CalendarService) -> int:
    if args.command == "add":
        task = service.insert(args.date, args.title, args.description, args.start, args.end)
        print(f"Added {_format_task(task)}")
    elif args.command == "delete":
        if service.delete(args.date, args.task_id):
            print(f"Deleted {args.task_id}")
        else:
            print(f"No task {args.task_id} on {args.date}")
    elif args.command == "list":
        tasks = service.filter(args.date, args.search)
        if not tasks:
            print("No tasks found")
        for task in tasks:
            print(_format_task(task))
    elif args.command == "month":
        days = service.month(args.year, args.month, args.search)
        if not days:
            print("No tasks found")
        for key, tasks in days.items():
            print(f"{key}  {len(tasks)} task{'s' if len(tasks) > 1 else ''}")
            for task in tasks:
                print(f"  {_format_task(task)}")
    elif args.command == "export":
        if args.stdout:
            print(service.export())
        else:
            path = service.export_to_file(args.out)
            print(f"Exported to {path}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    cfg = replace(settings)
    if args.data_dir:
        cfg.data_dir = Path(args.data_dir)
    if args.log_level:
        cfg.log_level = args.log_level.upper()
    setup_logging(cfg.log_level)

    if args.command == "serve":
        import uvicorn

        from .api.app import create_app

        uvicorn.run(
            create_app(app_settings=cfg),
            host=args.host or cfg.host,
            port=args.port or cfg.port,
        )
        return 0

    service = CalendarService.from_settings(cfg)
    try:
        with service:
            for warning in service.warnings:
                print(f"Warning: {warning}", file=sys.stderr)
            status = _run(args, service)
    except TaskCalError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    if service.persistence_degraded:
        print(f"Error: changes could not be saved to {service.persistence.path}", file=sys.stderr)
        return 1
    return status


if __name__ == "__main__":
    sys.exit(main())
