"""Listable inventory and workflow resources."""

from typing import Dict, List

from filter_engine.exceptions import UnknownResourceError
from filter_engine.models.resource import (
    Relation,
    RelationField,
    RelationKind,
    ResourceDescriptor,
    ResourceField,
    SearchField,
    relation_table,
)
from filter_engine.models.types import FieldType

TASK_STATUSES = ["pending", "in_progress", "in_review", "testing", "completed", "paused", "blocked", "cancelled", "reopened"]
TASK_TYPES = ["bug", "feature", "todo", "epic", "improvement"]
TASK_PRIORITIES = ["low", "medium", "high", "critical"]
RELEASE_NOTE_STATUSES = ["pending", "deployment_started", "deployed"]
SERVER_TYPES = ["os", "rds", "amplify", "lambda", "ec2", "ecs", "other"]
SPRINT_STATUSES = ["planned", "active", "completed", "cancelled"]


def _user(name: str, *fields: str) -> Relation:
    return Relation(
        name=name,
        model="User",
        fields=[RelationField(key=key) for key in (fields or ("email", "name"))],
    )


def _many(name: str, model: str, join_field: str, fields: List[RelationField]) -> Relation:
    return Relation(name=name, kind=RelationKind.QUANTIFIED, model=model, join_field=join_field, fields=fields)


def _tags() -> Relation:
    return _many("tags", "Tag", "tag", [RelationField(key="id", type=FieldType.INT), RelationField(key="name")])


def _servers() -> Relation:
    return _many(
        "servers",
        "Server",
        "server",
        [
            RelationField(key="id", type=FieldType.INT),
            RelationField(key="name"),
            RelationField(key="publicIp"),
            RelationField(key="privateIp"),
        ],
    )


def _services() -> Relation:
    return _many(
        "services",
        "Service",
        "service",
        [RelationField(key="id", type=FieldType.INT), RelationField(key="name"), RelationField(key="port", type=FieldType.INT)],
    )


def _credentials() -> Relation:
    return _many(
        "credentials",
        "Credential",
        "credential",
        [RelationField(key="id", type=FieldType.INT), RelationField(key="name"), RelationField(key="type")],
    )


def _groups() -> Relation:
    # Membership lives in the generic group_items table, resolved in a second pass
    return Relation(
        name="groups",
        kind=RelationKind.POLYMORPHIC,
        model="Group",
        fields=[RelationField(key="id", type=FieldType.INT), RelationField(key="name")],
    )


def _audit_fields() -> List[ResourceField]:
    return [
        ResourceField(key="createdAt", type=FieldType.DATETIME, optional=True),
        ResourceField(key="updatedAt", type=FieldType.DATETIME, optional=True),
        ResourceField(key="createdBy", type=FieldType.STRING, groupable=True),
    ]


TASKS = ResourceDescriptor(
    name="tasks",
    item_type="task",
    fields=[
        ResourceField(key="id", type=FieldType.INT),
        ResourceField(key="title", type=FieldType.STRING),
        ResourceField(key="description", type=FieldType.STRING),
        ResourceField(key="status", type=FieldType.STRING, enum_values=TASK_STATUSES, groupable=True),
        ResourceField(key="type", type=FieldType.STRING, enum_values=TASK_TYPES, groupable=True),
        ResourceField(key="priority", type=FieldType.STRING, enum_values=TASK_PRIORITIES, groupable=True),
        ResourceField(key="sprintId", type=FieldType.INT, groupable=True),
        ResourceField(key="serviceId", type=FieldType.INT, groupable=True),
        ResourceField(key="assignedTo", type=FieldType.STRING, groupable=True),
        ResourceField(key="attentionToId", type=FieldType.STRING),
        ResourceField(key="testerId", type=FieldType.STRING, groupable=True),
        ResourceField(key="parentTaskId", type=FieldType.INT),
        ResourceField(key="reopenCount", type=FieldType.INT),
        ResourceField(key="estimatedHours", type=FieldType.FLOAT, optional=True),
        ResourceField(key="actualHours", type=FieldType.FLOAT, optional=True),
        ResourceField(key="dueDate", type=FieldType.DATETIME, optional=True),
        ResourceField(key="assignedAt", type=FieldType.DATETIME, optional=True),
        ResourceField(key="completedAt", type=FieldType.DATETIME, optional=True),
        *_audit_fields(),
    ],
    relations=relation_table(
        Relation(name="sprint", model="Sprint", fields=[RelationField(key="name")]),
        Relation(name="service", model="Service", fields=[RelationField(key="name")]),
        _user("assignedToUser"),
        _user("attentionToUser"),
        _user("tester", "email"),
        _user("createdByUser"),
        _user("updatedByUser"),
        Relation(name="parentTask", model="Task", fields=[RelationField(key="title")]),
        _tags(),
    ),
    search_fields=[SearchField(key="title"), SearchField(key="description")],
)

SERVICES = ResourceDescriptor(
    name="services",
    item_type="service",
    fields=[
        ResourceField(key="id", type=FieldType.INT),
        ResourceField(key="name", type=FieldType.STRING),
        ResourceField(key="port", type=FieldType.INT),
        ResourceField(key="external", type=FieldType.BOOLEAN, groupable=True),
        *_audit_fields(),
    ],
    relations=relation_table(
        _user("createdByUser"),
        _servers(),
        _tags(),
        _credentials(),
        Relation(
            name="dependencies",
            kind=RelationKind.QUANTIFIED,
            model="ServiceDependency",
            fields=[RelationField(key="dependencyServiceId", type=FieldType.INT)],
            relations=relation_table(Relation(name="dependencyService", model="Service", fields=[RelationField(key="name")])),
        ),
        _groups(),
    ),
    search_fields=[
        SearchField(key="name"),
        SearchField(key="port", numeric=True),
        SearchField(key="servers.name"),
        SearchField(key="servers.publicIp"),
        SearchField(key="servers.privateIp"),
    ],
)

DOMAINS = ResourceDescriptor(
    name="domains",
    item_type="domain",
    fields=[
        ResourceField(key="id", type=FieldType.INT),
        ResourceField(key="name", type=FieldType.STRING),
        *_audit_fields(),
    ],
    relations=relation_table(
        _servers(),
        _services(),
        _tags(),
        _user("createdByUser"),
        _user("updatedByUser"),
        _groups(),
    ),
    search_fields=[SearchField(key="name")],
)

RELEASE_NOTES = ResourceDescriptor(
    name="release_notes",
    item_type="release_note",
    fields=[
        ResourceField(key="id", type=FieldType.INT),
        ResourceField(key="status", type=FieldType.STRING, enum_values=RELEASE_NOTE_STATUSES, groupable=True),
        ResourceField(key="note", type=FieldType.STRING),
        ResourceField(key="publishDate", type=FieldType.DATETIME, optional=True),
        ResourceField(key="serviceId", type=FieldType.INT, groupable=True),
        *_audit_fields(),
    ],
    relations=relation_table(
        Relation(name="service", model="Service", fields=[RelationField(key="name"), RelationField(key="port", type=FieldType.INT)]),
        _user("createdByUser"),
        _user("updatedByUser"),
        _many("tasks", "Task", "task", [RelationField(key="id", type=FieldType.INT), RelationField(key="title")]),
    ),
    search_fields=[SearchField(key="note")],
    soft_delete=False,
)

CREDENTIALS = ResourceDescriptor(
    name="credentials",
    item_type="credential",
    fields=[
        ResourceField(key="id", type=FieldType.INT),
        ResourceField(key="name", type=FieldType.STRING),
        ResourceField(key="type", type=FieldType.STRING, groupable=True),
        *_audit_fields(),
    ],
    relations=relation_table(
        _servers(),
        _services(),
        _tags(),
        _user("createdByUser"),
        _user("updatedByUser"),
        _groups(),
    ),
    search_fields=[SearchField(key="name"), SearchField(key="type")],
)

SERVERS = ResourceDescriptor(
    name="servers",
    item_type="server",
    fields=[
        ResourceField(key="id", type=FieldType.INT),
        ResourceField(key="name", type=FieldType.STRING),
        ResourceField(key="type", type=FieldType.STRING, enum_values=SERVER_TYPES, groupable=True),
        ResourceField(key="publicIp", type=FieldType.STRING),
        ResourceField(key="privateIp", type=FieldType.STRING),
        ResourceField(key="username", type=FieldType.STRING),
        ResourceField(key="port", type=FieldType.INT),
        ResourceField(key="sshPort", type=FieldType.INT),
        *_audit_fields(),
    ],
    relations=relation_table(
        _user("createdByUser"),
        _services(),
        _tags(),
        _credentials(),
        _groups(),
    ),
    search_fields=[SearchField(key="name"), SearchField(key="publicIp"), SearchField(key="privateIp"), SearchField(key="username")],
)

SPRINTS = ResourceDescriptor(
    name="sprints",
    item_type="sprint",
    fields=[
        ResourceField(key="id", type=FieldType.INT),
        ResourceField(key="name", type=FieldType.STRING),
        ResourceField(key="description", type=FieldType.STRING, optional=True),
        ResourceField(key="status", type=FieldType.STRING, enum_values=SPRINT_STATUSES, groupable=True),
        ResourceField(key="startDate", type=FieldType.DATETIME),
        ResourceField(key="endDate", type=FieldType.DATETIME),
        *_audit_fields(),
    ],
    relations=relation_table(
        _user("createdByUser"),
        # Tasks reference their sprint directly, no join table
        Relation(
            name="tasks",
            kind=RelationKind.QUANTIFIED,
            model="Task",
            fields=[RelationField(key="id", type=FieldType.INT), RelationField(key="title"), RelationField(key="status")],
        ),
    ),
    search_fields=[SearchField(key="name"), SearchField(key="description")],
)

RESOURCES: Dict[str, ResourceDescriptor] = {
    resource.name: resource for resource in (TASKS, SERVICES, DOMAINS, RELEASE_NOTES, CREDENTIALS, SERVERS, SPRINTS)
}


def get_resource(name: str) -> ResourceDescriptor:
    """Look up a resource by name (``release-notes`` and ``releaseNotes`` are accepted)."""
    normalized = name.replace("-", "_")
    if normalized == "releaseNotes":
        normalized = "release_notes"
    resource = RESOURCES.get(normalized)
    if resource is None:
        raise UnknownResourceError(f"Unknown resource: {name}")
    return resource
