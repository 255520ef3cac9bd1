"""
Static definitions for the OpMon data source.

Query modes, object types, editor field identifiers and the sentinel
defaults that mark a selector as "nothing selected".
"""

from enum import Enum, IntEnum
from typing import Any, Dict, List


class QueryMode(IntEnum):
    AVAILABILITY = 0
    CAPACITY = 1
    SYSTEM = 2
    STATUS = 3


class ObjectType(str, Enum):
    HOST = "Host"
    SERVICE = "Service"
    HOSTGROUP = "Hostgroup"
    SERVICEGROUP = "Servicegroup"
    CATALOG = "Service catalog"
    SYSTEM = "System"


class OptionField(str, Enum):
    """Selectors whose option lists are fetched from the backend."""
    HOST = "Host"
    SERVICE = "Service"
    HOSTGROUP = "Hostgroup"
    SERVICEGROUP = "Servicegroup"
    CATALOG = "Service catalog"
    METRIC = "metric"
    LABEL = "label"
    TIMECUT = "timeCut"


class Datapoint(IntEnum):
    """Positions inside a backend [value, timestamp] datapoint."""
    VALUE = 0
    TS = 1


# Sentinel values, keyed by python attribute name on schemas.Query
DEFAULT_QUERY: Dict[str, Any] = {
    "host": "- select host -",
    "service": "- select service -",
    "metric": "- all -",
    "time_cut": "24x7",
    "result_format": "time_series",
    "object_type": ObjectType.HOST.value,
    "extended_state": False,
    "downtime_as_ok": False,
    "hard_state_only": True,
    "hostgroup": "- select hostgroup -",
    "mode": QueryMode.AVAILABILITY,
    "group_by": "none",
    "servicegroup": "- select servicegroup -",
    "service_catalog": "- select service catalog -",
}

QUERY_MODE_LABELS: List[str] = ["Availability", "Capacity", "System", "Status"]

GROUP_BY: List[str] = ["none", "avg", "max", "min", "sum"]

RESULT_FORMATS: List[Dict[str, str]] = [
    {"value": "time_series", "label": "Time series"},
    {"value": "table", "label": "Table"},
]

# Fields that identify the monitored object and go through variable
# resolution and set-pattern compression
FILTER_FIELDS = ("host", "service", "hostgroup", "servicegroup", "service_catalog", "metric")

DEFAULT_ENDPOINT = (
    "/opmon/seagull/www/index.php/wsconnector/action/datasource"
    "?mod=OPVIEW&shareduid=W1ksbu9/9O95NGvyrgbVYe6yEE2LcgQdivS5PHhiVe0=&q="
)

JSON_HEADERS = {"Content-Type": "application/json"}
