# GitHub command plugin


def describe():
    return {
        "bindings": ["gh", "github"],
        "description": "Navigate to GitHub repositories",
        "example": "gh facebook/react",
    }


def process(full_args):
    args = get_args(full_args, split(full_args, " ")[0])
    if args == "":
        return "https://github.com"
    return "https://github.com/" + url_encode_path(args)
