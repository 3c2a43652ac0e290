"""
Built-in column registries.

Each resource module of the manager contributes the columns its listings
expose. Every name in a ``filter_columns`` allow-list must resolve to a
column below, or be a ``<type>_id`` soft reference.
"""

from scanquery.core.column_registry.registry import (
    ColumnRegistry,
    ColumnSet,
    ColumnSpec,
    ResourceRegistry,
    ResourceType,
)
from scanquery.core.terms import KeywordType

TEXT = KeywordType.TEXT
INTEGER = KeywordType.INTEGER
REAL = KeywordType.REAL


# -----------------------------
# Shared columns
# -----------------------------

GET_FILTER_COLUMNS: tuple[str, ...] = (
    "uuid",
    "name",
    "comment",
    "created",
    "modified",
    "_owner",
)


def get_columns(table: str) -> tuple[ColumnSpec, ...]:
    """Columns every owned resource has."""
    return (
        ColumnSpec("id", kind=INTEGER),
        ColumnSpec("uuid"),
        ColumnSpec("name"),
        ColumnSpec("comment"),
        ColumnSpec("iso_time (creation_time)"),
        ColumnSpec("iso_time (modification_time)"),
        ColumnSpec("creation_time", "created", INTEGER),
        ColumnSpec("modification_time", "modified", INTEGER),
        ColumnSpec(
            f"(SELECT name FROM users AS inner_users WHERE inner_users.id = {table}.owner)",
            "_owner",
        ),
        ColumnSpec("owner", kind=INTEGER),
    )


# -----------------------------
# Per resource columns
# -----------------------------


def _task_columns(table: str) -> ColumnSet:
    return ColumnSet(
        table=table,
        select_columns=(
            *get_columns(table),
            ColumnSpec("run_status_name (run_status)", "status"),
            ColumnSpec(f"task_report_count ({table}.id)", "total", INTEGER),
            ColumnSpec(f"task_first_report ({table}.id)", "first_report"),
            ColumnSpec(f"task_last_report ({table}.id)", "last_report"),
            ColumnSpec(f"task_threat_level ({table}.id)", "threat"),
            ColumnSpec(f"task_trend ({table}.id)", "trend"),
            ColumnSpec(f"task_severity ({table}.id)", "severity", REAL),
            ColumnSpec(
                f"(SELECT name FROM schedules WHERE schedules.id = {table}.schedule)",
                "schedule",
            ),
            ColumnSpec(
                f"(SELECT name FROM targets WHERE targets.id = {table}.target)",
                "target",
            ),
            ColumnSpec("usage_type"),
        ),
        where_columns=(
            ColumnSpec(f"task_host_count ({table}.id)", "hosts", INTEGER),
        ),
        filter_columns=(
            *GET_FILTER_COLUMNS,
            "status",
            "total",
            "first_report",
            "last_report",
            "threat",
            "trend",
            "severity",
            "schedule",
            "target",
            "usage_type",
            "hosts",
            "target_id",
            "schedule_id",
        ),
    )


def _report_columns(table: str) -> ColumnSet:
    counts = tuple(
        ColumnSpec(f"report_severity_count ({table}.id, '{level}')", level, INTEGER)
        for level in ("high", "medium", "low", "log", "false_positive")
    )
    return ColumnSet(
        table=table,
        select_columns=(
            *get_columns(table),
            ColumnSpec("run_status_name (scan_run_status)", "status"),
            ColumnSpec(
                f"(SELECT name FROM tasks WHERE tasks.id = {table}.task)", "task"
            ),
            ColumnSpec(f"report_severity ({table}.id)", "severity", REAL),
            *counts,
            ColumnSpec(f"report_host_count ({table}.id)", "hosts", INTEGER),
            ColumnSpec(
                f"report_result_host_count ({table}.id)", "result_hosts", INTEGER
            ),
            ColumnSpec(f"report_result_count ({table}.id)", "results", INTEGER),
        ),
        filter_columns=(
            *GET_FILTER_COLUMNS,
            "status",
            "task",
            "severity",
            "high",
            "medium",
            "low",
            "log",
            "false_positive",
            "hosts",
            "result_hosts",
            "results",
            "task_id",
        ),
    )


def _result_columns(table: str) -> ColumnSet:
    return ColumnSet(
        table=table,
        select_columns=(
            *get_columns(table),
            ColumnSpec("host"),
            ColumnSpec("port", "location"),
            ColumnSpec("nvt"),
            ColumnSpec("severity", kind=REAL),
            ColumnSpec(f"{table}.severity", "original_severity", REAL),
            ColumnSpec("qod", kind=INTEGER),
            ColumnSpec("description"),
            ColumnSpec("severity_to_level (severity, 0)", "threat"),
            ColumnSpec(
                f"(SELECT name FROM tasks WHERE tasks.id = {table}.task)", "task"
            ),
        ),
        where_columns=(
            ColumnSpec(
                f"(SELECT cve FROM nvts WHERE nvts.oid = {table}.nvt)", "cve"
            ),
        ),
        filter_columns=(
            *GET_FILTER_COLUMNS,
            "host",
            "location",
            "nvt",
            "severity",
            "original_severity",
            "qod",
            "description",
            "threat",
            "task",
            "cve",
            "task_id",
            "report_id",
        ),
    )


def _annotation_columns(table: str, *extra: ColumnSpec) -> ColumnSet:
    return ColumnSet(
        table=table,
        select_columns=(
            *get_columns(table),
            ColumnSpec("nvt"),
            ColumnSpec("text"),
            ColumnSpec("hosts"),
            ColumnSpec("port"),
            ColumnSpec(
                "(end_time = 0 OR end_time >= m_now ())", "active", INTEGER
            ),
            *extra,
        ),
        where_columns=(
            ColumnSpec(
                f"(SELECT uuid FROM results WHERE results.id = {table}.result)",
                "result_id",
            ),
        ),
        filter_columns=(
            *GET_FILTER_COLUMNS,
            "nvt",
            "text",
            "hosts",
            "port",
            "active",
            "result_id",
            "task_id",
            *(column.name for column in extra),
        ),
    )


def _note_columns(table: str) -> ColumnSet:
    return _annotation_columns(table)


def _override_columns(table: str) -> ColumnSet:
    return _annotation_columns(
        table,
        ColumnSpec("severity", kind=REAL),
        ColumnSpec("new_severity", kind=REAL),
    )


def _target_columns(table: str) -> ColumnSet:
    credential_columns = tuple(
        ColumnSpec(
            "(SELECT name FROM credentials WHERE credentials.id ="
            " (SELECT credential FROM targets_login_data"
            f" WHERE target = {table}.id AND type = CAST ('{kind}' AS text)))",
            f"{kind}_credential",
        )
        for kind in ("ssh", "smb", "esxi", "snmp")
    )
    return ColumnSet(
        table=table,
        select_columns=(
            *get_columns(table),
            ColumnSpec("hosts"),
            ColumnSpec("exclude_hosts"),
            ColumnSpec("max_hosts (hosts, exclude_hosts)", "ips", INTEGER),
            ColumnSpec(
                f"(SELECT name FROM port_lists WHERE port_lists.id = {table}.port_list)",
                "port_list",
            ),
            *credential_columns,
        ),
        filter_columns=(
            *GET_FILTER_COLUMNS,
            "hosts",
            "exclude_hosts",
            "ips",
            "port_list",
            *(column.name for column in credential_columns),
            "port_list_id",
        ),
    )


def _role_columns(table: str) -> ColumnSet:
    return ColumnSet(
        table=table,
        select_columns=get_columns(table),
        where_columns=(
            ColumnSpec(
                "(SELECT group_concat (name, ', ') FROM roles AS inner_roles"
                f" WHERE inner_roles.id = {table}.id)",
                "roles",
            ),
        ),
        filter_columns=(*GET_FILTER_COLUMNS, "roles"),
    )


def _host_columns(table: str) -> ColumnSet:
    return ColumnSet(
        table=table,
        select_columns=(
            *get_columns(table),
            ColumnSpec(
                "(SELECT round (CAST (severity AS numeric), 1)"
                " FROM host_max_severities"
                f" WHERE host = {table}.id"
                " ORDER BY creation_time DESC LIMIT 1)",
                "severity",
                REAL,
            ),
            ColumnSpec(
                "(SELECT value FROM host_details"
                f" WHERE host = {table}.id AND name = 'best_os_txt'"
                " ORDER BY id DESC LIMIT 1)",
                "os",
            ),
            ColumnSpec(
                "(SELECT value FROM host_identifiers"
                f" WHERE host = {table}.id AND name = 'hostname'"
                " ORDER BY creation_time DESC LIMIT 1)",
                "hostname",
            ),
            ColumnSpec(
                "(SELECT value FROM host_identifiers"
                f" WHERE host = {table}.id AND name = 'ip'"
                " ORDER BY creation_time DESC LIMIT 1)",
                "ip",
            ),
            ColumnSpec("modification_time", "updated", INTEGER),
        ),
        filter_columns=(
            *GET_FILTER_COLUMNS,
            "severity",
            "os",
            "hostname",
            "ip",
            "updated",
        ),
    )


def _port_list_columns(table: str) -> ColumnSet:
    return ColumnSet(
        table=table,
        select_columns=(
            *get_columns(table),
            ColumnSpec(f"port_list_count ({table}.id, 0)", "total", INTEGER),
            ColumnSpec(f"port_list_count ({table}.id, 1)", "tcp", INTEGER),
            ColumnSpec(f"port_list_count ({table}.id, 2)", "udp", INTEGER),
            ColumnSpec("predefined", kind=INTEGER),
        ),
        filter_columns=(*GET_FILTER_COLUMNS, "total", "tcp", "udp", "predefined"),
    )


def _filter_columns(table: str) -> ColumnSet:
    return ColumnSet(
        table=table,
        select_columns=(
            *get_columns(table),
            ColumnSpec("type"),
            ColumnSpec("term"),
        ),
        filter_columns=(*GET_FILTER_COLUMNS, "type", "term"),
    )


# -----------------------------
# Default Registry Definition
# -----------------------------

_BUILDERS = {
    ResourceType.TASK: (_task_columns, False),
    ResourceType.REPORT: (_report_columns, False),
    ResourceType.RESULT: (_result_columns, False),
    ResourceType.NOTE: (_note_columns, True),
    ResourceType.OVERRIDE: (_override_columns, True),
    ResourceType.TARGET: (_target_columns, True),
    ResourceType.ROLE: (_role_columns, True),
    ResourceType.HOST: (_host_columns, False),
    ResourceType.PORT_LIST: (_port_list_columns, True),
    ResourceType.FILTER: (_filter_columns, True),
}


def _build_registry(resource_type: ResourceType) -> ColumnRegistry:
    builder, has_trash = _BUILDERS[resource_type]
    table = f"{resource_type.value}s"
    return ColumnRegistry(
        resource_type=resource_type,
        live=builder(table),
        trash=builder(f"{table}_trash") if has_trash else None,
    )


_DEFAULT_REGISTRIES: dict[ResourceType, ColumnRegistry] = {
    resource_type: _build_registry(resource_type) for resource_type in _BUILDERS
}


def get_default_registry() -> ResourceRegistry:
    """Get the registry of all built-in resource types."""
    return ResourceRegistry(registries=_DEFAULT_REGISTRIES)
