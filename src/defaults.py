"""
Placeholder and default values shared by the schema and the normalization layer.

The backend stores these placeholders in non-nullable columns to mean
"not yet specified"; the domain layer turns them back into None.
"""

LOCATION_PLACEHOLDER = "Location TBD"
MEET_LOCATION_PLACEHOLDER = "Meet TBD"
PREPARED_BY_PLACEHOLDER = "Unassigned"
TIME_PLACEHOLDER = "00:00"
ASSIGNMENT_TYPE_PLACEHOLDER = "General Support"
EQUIPMENT_AREA_PLACEHOLDER = "Assignment TBD"
PATROL_VEHICLE_PLACEHOLDER = "Vehicle TBD"
AREA_ASSIGNMENT_PLACEHOLDER = "Area TBD"

# Display text for absent dates and times
DISPLAY_PLACEHOLDER = "TBD"

DEFAULT_TASK_CATEGORY_COLOR = "#3B82F6"

TASK_STATUSES = ("Not Started", "In Progress", "Completed")
DEFAULT_TASK_STATUS = TASK_STATUSES[0]

# Built-in assignment categories, shown when an account has none persisted
DEFAULT_ASSIGNMENT_CATEGORIES = (
    "Equipment Operator",
    "Safety Monitor",
    "Setup/Breakdown",
    "Crowd Control",
    "Communications",
    "First Aid",
    "General Support",
    "Technical Support",
)
