"""
Permissions and Roles Configuration
This config defines the permission matrix for every module and which
effective role is granted which permission.

Effective roles are derived per request (see app.core.access):
- admin:     "admin" row in user_roles
- maker:     profile.role == "maker" and profile.maker_approved
- moderator: "moderator" row in user_roles
- user:      any signed-in account
"""

# Define modules and their actions
MODULES = {
    "badges": {
        "resource": "badges",
        "actions": ["create", "read", "update", "delete", "approve"],
        "description": "Badge catalog"
    },
    "badge_images": {
        "resource": "badge_images",
        "actions": ["create", "read", "update", "delete"],
        "description": "Badge image gallery"
    },
    "ownership": {
        "resource": "ownership",
        "actions": ["read", "update"],
        "description": "Own / want collection tracking"
    },
    "uploads": {
        "resource": "uploads",
        "actions": ["create", "read", "update", "delete"],
        "description": "User photo uploads"
    },
    "matching": {
        "resource": "matching",
        "actions": ["read", "process"],
        "description": "Image matching and embedding generation"
    },
    "users": {
        "resource": "users",
        "actions": ["read", "update", "approve_maker"],
        "description": "User profile management"
    },
    "roles": {
        "resource": "roles",
        "actions": ["read", "assign"],
        "description": "Application role management"
    },
    "teams": {
        "resource": "teams",
        "actions": ["create", "read", "update", "delete", "manage_members"],
        "description": "Badge team management"
    },
    "team_requests": {
        "resource": "team_requests",
        "actions": ["create", "read", "review"],
        "description": "Requests to join a badge team"
    },
    "notifications": {
        "resource": "notifications",
        "actions": ["send"],
        "description": "Discord notifications"
    },
    "diagnostics": {
        "resource": "diagnostics",
        "actions": ["read"],
        "description": "Provider API key checks"
    },
    "search": {
        "resource": "search",
        "actions": ["read", "test"],
        "description": "Web search and search testing"
    }
}

# Additional descriptions for non-CRUD actions
MODULE_SPECIFIC_PERMISSIONS = {
    "badges": {
        "approve": "Approve or reject submitted badges"
    },
    "matching": {
        "process": "Generate embeddings for catalog badges"
    },
    "users": {
        "approve_maker": "Approve or revoke badge maker status"
    },
    "roles": {
        "assign": "Assign roles to users"
    },
    "teams": {
        "manage_members": "Manage team members"
    },
    "team_requests": {
        "review": "Approve or reject team requests"
    },
    "notifications": {
        "send": "Send Discord notifications"
    },
    "search": {
        "test": "Run the web search tester"
    }
}

# Grants per effective role. "*" grants every action of the resource.
ROLE_GRANTS = {
    "user": {
        "badges": ["create", "read"],
        "badge_images": ["read"],
        "ownership": ["read", "update"],
        "uploads": ["create"],
        "matching": ["read"],
        "team_requests": ["create"],
        "notifications": ["send"],
        "search": ["read"],
    },
    "moderator": {
        "uploads": ["read", "update", "delete"],
        "users": ["read"],
    },
    "maker": {
        "badges": ["update", "approve"],
        "badge_images": ["create", "update", "delete"],
        "uploads": ["read", "update"],
        "teams": ["read"],
    },
    "admin": {module: ["*"] for module in MODULES},
}

ROLE_DESCRIPTIONS = {
    "user": "Signed-in collector",
    "moderator": "Reviews uploads and users",
    "maker": "Approved badge maker; manages badges of the assigned team",
    "admin": "Full administrative access",
}


def _expand(resource: str, actions):
    module_actions = MODULES[resource]["actions"]
    if "*" in actions:
        return [f"{resource}:{a}" for a in module_actions]
    return [f"{resource}:{a}" for a in actions if a in module_actions]


def get_role_permissions(role: str):
    """Permission names granted directly to one effective role."""
    grants = ROLE_GRANTS.get(role, {})
    names = []
    for resource, actions in grants.items():
        names.extend(_expand(resource, actions))
    return sorted(set(names))


def get_permissions_for_roles(roles):
    """Union of permission names for a set of effective roles."""
    names = set()
    for role in roles:
        names.update(get_role_permissions(role))
    return sorted(names)


# Generate permission matrix
def get_permission_matrix():
    """
    Returns a dictionary with all permissions and their associated roles
    Format: {
        "permissions": [
            {"name": "badges:create", "resource": "badges", "action": "create", "description": "..."},
            ...
        ],
        "roles": [
            {"name": "maker", "description": "...", "permissions": ["badges:approve", ...]},
            ...
        ]
    }
    """
    permissions = []
    roles = []

    for module_name, module_config in MODULES.items():
        resource = module_config["resource"]
        for action in module_config["actions"]:
            description = f"{action.capitalize()} {resource}"
            if module_name in MODULE_SPECIFIC_PERMISSIONS and action in MODULE_SPECIFIC_PERMISSIONS[module_name]:
                description = MODULE_SPECIFIC_PERMISSIONS[module_name][action]
            permissions.append({
                "name": f"{resource}:{action}",
                "resource": resource,
                "action": action,
                "description": description
            })

    for role_name in ROLE_GRANTS:
        roles.append({
            "name": role_name,
            "description": ROLE_DESCRIPTIONS[role_name],
            "permissions": get_role_permissions(role_name)
        })

    return {
        "permissions": permissions,
        "roles": roles
    }


PERMISSION_MATRIX = get_permission_matrix()
