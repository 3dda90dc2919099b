from html import escape

_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{title}</title>
</head>
<body style="font-family: sans-serif; text-align: center; margin-top: 10vh">
{body}
</body>
</html>
"""


def render_page(title: str, body: str) -> str:
    """Wrap already escaped `body` HTML in the site layout."""
    return _PAGE.format(title=escape(title), body=body)


def render_auth_success(username: str, guild_image_source: str) -> str:
    image = (
        f'<img src="{escape(guild_image_source)}" alt="" width="128" height="128">'
        if guild_image_source
        else ""
    )
    return render_page(
        "Authentication successful",
        f"{image}<h1>Welcome {escape(username)}!</h1>"
        "<p>Your Google account is linked, you can go back to Discord.</p>",
    )


def render_error(message: str, correlation_id: str | None = None) -> str:
    body = f"<h1>Something went wrong</h1><p>{escape(message)}</p>"
    if correlation_id is not None:
        body += (
            "<p>If this error persists please contact the developers with the following "
            f"code: <code>{escape(correlation_id)}</code></p>"
        )
    return render_page("Error", body)
