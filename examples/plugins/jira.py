# Jira command plugin
# Point JIRA_BASE at your instance.

JIRA_BASE = "https://mycompany.atlassian.net"
UPPERCASE = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
DIGITS = "0123456789"


def describe():
    return {
        "bindings": ["jira", "j"],
        "description": "Navigate to Jira issues or search",
        "example": "jira PROJ-123",
    }


def is_issue_key(text):
    parts = split(text, "-")
    if len(parts) != 2 or parts[0] == "" or parts[1] == "":
        return False
    return all(c in UPPERCASE for c in parts[0]) and all(c in DIGITS for c in parts[1])


def process(full_args):
    args = trim(get_args(full_args, split(full_args, " ")[0]))
    if args == "":
        return JIRA_BASE + "/jira/projects"
    if is_issue_key(args):
        return JIRA_BASE + "/browse/" + args
    return JIRA_BASE + "/issues/?jql=text~" + url_encode(args)
