"""
Add celery-beat schedules for the billing sweeps.

This migration creates the periodic tasks that settle money over time:
- Message refunds: every 15 minutes
- Earnings maturation: hourly
- Weekly payouts: Fridays at 12:00 UTC
"""

from django.db import migrations

INTERVAL_TASKS = [
    {
        "name": "Process Message Refunds",
        "task": "payments.workers.refund_sweep.process_message_refunds",
        "every": 15,
        "period": "minutes",
        "description": (
            "Refunds billable messages whose reply deadline passed without "
            "an answer from the earner."
        ),
    },
    {
        "name": "Process Pending Earnings",
        "task": "payments.workers.earnings_maturation.process_pending_earnings",
        "every": 1,
        "period": "hours",
        "description": "Moves earnings past the 48 hour hold to available balance.",
    },
]

WEEKLY_PAYOUT_TASK = "Run Weekly Payouts"


def create_periodic_tasks(apps, schema_editor):
    """Create the periodic tasks for the billing sweeps."""
    IntervalSchedule = apps.get_model("django_celery_beat", "IntervalSchedule")
    CrontabSchedule = apps.get_model("django_celery_beat", "CrontabSchedule")
    PeriodicTask = apps.get_model("django_celery_beat", "PeriodicTask")

    for task_def in INTERVAL_TASKS:
        schedule, _ = IntervalSchedule.objects.get_or_create(
            every=task_def["every"],
            period=task_def["period"],
        )
        PeriodicTask.objects.get_or_create(
            name=task_def["name"],
            defaults={
                "task": task_def["task"],
                "interval": schedule,
                "enabled": True,
                "description": task_def["description"],
            },
        )

    crontab, _ = CrontabSchedule.objects.get_or_create(
        minute="0",
        hour="12",
        day_of_week="5",
        day_of_month="*",
        month_of_year="*",
        timezone="UTC",
    )
    PeriodicTask.objects.get_or_create(
        name=WEEKLY_PAYOUT_TASK,
        defaults={
            "task": "payments.workers.payout_executor.run_weekly_payouts",
            "crontab": crontab,
            "enabled": True,
            "description": (
                "Transfers available earnings of at least the payout minimum "
                "to every ready connected account."
            ),
        },
    )


def remove_periodic_tasks(apps, schema_editor):
    """Remove the periodic tasks on migration rollback."""
    PeriodicTask = apps.get_model("django_celery_beat", "PeriodicTask")

    names = [task_def["name"] for task_def in INTERVAL_TASKS] + [WEEKLY_PAYOUT_TASK]
    PeriodicTask.objects.filter(name__in=names).delete()


class Migration(migrations.Migration):
    dependencies = [
        ("payments", "0001_initial"),
        ("django_celery_beat", "0019_alter_periodictasks_options"),
    ]

    operations = [
        migrations.RunPython(create_periodic_tasks, remove_periodic_tasks),
    ]
