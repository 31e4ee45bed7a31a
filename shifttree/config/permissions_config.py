"""
Schedule Role Configuration
This config defines which schedule roles may perform each action.
Route handlers check the caller's role against these allow-lists after the
schedule (or shift) has been found to be visible to the caller.
"""

OWNER = "owner"
MANAGER = "manager"
MEMBER = "member"

ROLES = [OWNER, MANAGER, MEMBER]

# Roles that can be granted through user_schedule_membership
MEMBERSHIP_ROLES = [MANAGER, MEMBER]

# Define actions per resource and the roles allowed to perform them
RESOURCES = {
    "schedules": {
        "read": {"roles": [OWNER, MANAGER, MEMBER], "description": "View the schedule"},
        "delete": {"roles": [OWNER, MANAGER], "description": "Remove the schedule"},
    },
    "shifts": {
        "read": {"roles": [OWNER, MANAGER, MEMBER], "description": "View shifts of the schedule"},
        "create": {"roles": [OWNER, MANAGER], "description": "Create shifts in the schedule"},
        "update": {"roles": [OWNER, MANAGER], "description": "Edit shift times and details"},
        "delete": {"roles": [OWNER, MANAGER], "description": "Delete shifts"},
    },
    "members": {
        "read": {"roles": [OWNER, MANAGER], "description": "View schedule members"},
        "add": {"roles": [OWNER, MANAGER], "description": "Add members to the schedule"},
        "remove": {"roles": [OWNER, MANAGER], "description": "Remove members from the schedule"},
        "grant_manager": {"roles": [OWNER], "description": "Add or remove managers"},
    },
    "signups": {
        "read": {"roles": [OWNER, MANAGER], "description": "View all signups of the schedule"},
        "self": {"roles": [MEMBER], "description": "Sign up for or give up a shift"},
        "delegate": {"roles": [OWNER, MANAGER], "description": "Sign members up for shifts or remove them"},
    },
}


def get_permission_matrix():
    """
    Returns the role matrix
    Format: {
        "roles": ["owner", "manager", "member"],
        "actions": [
            {"name": "shifts:create", "roles": ["owner", "manager"], "description": "..."},
            ...
        ]
    }
    """
    actions = []
    for resource, resource_actions in RESOURCES.items():
        for action, action_config in resource_actions.items():
            actions.append({
                "name": f"{resource}:{action}",
                "roles": list(action_config["roles"]),
                "description": action_config["description"]
            })
    return {
        "roles": list(ROLES),
        "actions": actions
    }


PERMISSION_MATRIX = get_permission_matrix()

# Flattened lookup: "shifts:create" -> {"owner", "manager"}
ALLOWED_ROLES = {a["name"]: frozenset(a["roles"]) for a in PERMISSION_MATRIX["actions"]}


def role_allows(role: str, action: str) -> bool:
    """True if the given schedule role may perform the action"""
    if action not in ALLOWED_ROLES:
        raise KeyError(f"Unknown action: {action}")
    return role in ALLOWED_ROLES[action]
