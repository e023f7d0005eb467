"""The Supabase tables exposed by the API and how each one is shaped."""

from lifeboard.services.resource_service import Resource

TASKS = Resource(table="tasks", label="task", plural="tasks")

GOALS = Resource(table="goals", label="goal", plural="goals")

MILESTONES = Resource(
    table="milestones",
    label="milestone",
    plural="milestones",
    order_by="order_index",
    ascending=True,
    flag="completed",
    aliases={"order": "order_index"},
    create_defaults={"order_index": 1},
)

HABITS = Resource(
    table="habits",
    label="habit",
    plural="habits",
    flag="active",
    flag_as_string=True,
)

HABIT_LOGS = Resource(
    table="habit_logs",
    label="habit log",
    plural="habit logs",
    order_by="date",
    flag="completed",
    flag_as_string=True,
)

# One row per user per day: posting the same date again merges into it.
HEALTH_RECORDS = Resource(
    table="health_tracking",
    label="health data",
    plural="health data",
    order_by="date",
    upsert_on="user_id,date",
)

JOURNAL_ENTRIES = Resource(
    table="journal_entries",
    label="journal entry",
    plural="journal entries",
    order_by="date",
)
