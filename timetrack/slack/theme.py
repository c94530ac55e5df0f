"""Render command reports as Slack message payloads (text + attachments)."""

from timetrack.models import Project, Timer
from timetrack.tracking.reports import StartReport, StatusReport, StopReport

SUMMARY_COLOR = "#000000"
STARTED_COLOR = "#F5A623"
COMPLETED_COLOR = "#7ED321"
ERROR_COLOR = "#D0021B"
MARKDOWN_IN = ["text", "pretext"]


def format_duration(minutes: int) -> str:
    """Minutes as ``H:MM``."""
    hours, mins = divmod(max(0, int(minutes)), 60)
    return f"{hours}:{mins:02d}"


def channel_link(project: Project) -> str:
    return f"<#{project.slack_channel_id}|{project.name or project.slack_channel_id}>"


def format_error(message: str) -> dict:
    return {
        "text": "",
        "attachments": [
            {"color": ERROR_COLOR, "text": message, "mrkdwn_in": MARKDOWN_IN},
        ],
    }


def format_start(report: StartReport) -> dict:
    attachments = []

    if report.stopped_timer is not None:
        attachments.append(_timer_attachment(
            "Completed:", COMPLETED_COLOR, report.stopped_timer, report.stopped_task_total
        ))
    if report.started_timer is not None:
        attachments.append(_timer_attachment(
            "Started:", STARTED_COLOR, report.started_timer, report.started_task_total
        ))
    if report.already_started_timer is not None:
        attachments.append(_timer_attachment(
            "Already running:", STARTED_COLOR, report.already_started_timer, report.already_started_task_total
        ))

    attachments.append(_summary_attachment(report.period.name, report.member_total))
    return {"text": "", "attachments": attachments}


def format_stop(report: StopReport) -> dict:
    attachments = [
        _timer_attachment("Completed:", COMPLETED_COLOR, report.stopped_timer, report.stopped_task_total),
        _summary_attachment(report.period.name, report.member_total),
    ]
    return {"text": "", "attachments": attachments}


def format_status(report: StatusReport) -> dict:
    period_name = report.period.name
    payload = {"text": f"Your status for {period_name}", "attachments": []}

    current_task_id = report.current_timer.task_id if report.current_timer is not None else None
    lines = []
    for total in report.tasks:
        # The running task is shown in its own attachment below
        if total.task.id == current_task_id:
            continue
        if total.task.project_id != report.project.id:
            lines.append(_task_line(total.task.name, total.minutes, project=total.task.project))
        else:
            lines.append(_task_line(total.task.name, total.minutes))

    if lines:
        payload["attachments"].append({
            "author_name": "Completed:",
            "color": COMPLETED_COLOR,
            "text": "".join(lines),
            "mrkdwn_in": MARKDOWN_IN,
        })

    if report.current_timer is not None:
        payload["attachments"].append(_timer_attachment(
            "Current:", STARTED_COLOR, report.current_timer, report.current_task_total
        ))

    if report.tasks or report.current_timer is not None:
        payload["attachments"].append(_summary_attachment(period_name, report.member_total))
    else:
        payload["text"] = f"You have no tasks completed {period_name}"

    return payload


def _task_line(name: str, minutes: int, project: Project = None) -> str:
    if project is not None:
        return f"•  *{format_duration(minutes)}*  {channel_link(project)}  {name}\n"
    return f"•  *{format_duration(minutes)}*  {name}\n"


def _timer_attachment(author: str, color: str, timer: Timer, task_total: int) -> dict:
    task = timer.task
    return {
        "author_name": author,
        "color": color,
        "text": _task_line(task.name, task_total),
        "footer": f"Project: {channel_link(task.project)} > Task: {task.tag}",
        "mrkdwn_in": MARKDOWN_IN,
    }


def _summary_attachment(period_name: str, minutes: int) -> dict:
    return {
        "color": SUMMARY_COLOR,
        "text": f"*Your total for {period_name} is {format_duration(minutes)}*",
        "mrkdwn_in": MARKDOWN_IN,
    }
