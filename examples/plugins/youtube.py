# YouTube command plugin

SHORTCUTS = {
    "studio": "https://studio.youtube.com",
    "subs": "https://youtube.com/feed/subscriptions",
    "subscriptions": "https://youtube.com/feed/subscriptions",
}


def describe():
    return {
        "bindings": ["yt", "youtube"],
        "description": "Navigate to YouTube or search videos",
        "example": "yt rust tutorial",
    }


def process(full_args):
    args = get_args(full_args, split(full_args, " ")[0])
    if args == "":
        return "https://youtube.com"
    if args in SHORTCUTS:
        return SHORTCUTS[args]
    return "https://youtube.com/results?search_query=" + url_encode(args)
