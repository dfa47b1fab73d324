"""OAuth popup result pages.

The login runs in a popup opened by the CMS. The callback page reports the
outcome to window.opener with postMessage:

    authorizing:<provider>
    authorization:<provider>:success:{"token": ..., "provider": ...}
    authorization:<provider>:error:{"error": ...}

Every value placed in script text goes through _js_string().
"""

import html
import json

_JS_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def _js_string(value: str) -> str:
    """Return value as a JavaScript string literal safe inside <script>."""
    literal = json.dumps(value)
    for char, escaped in _JS_ESCAPES.items():
        literal = literal.replace(char, escaped)
    return literal


def _compact_json(payload: dict[str, str]) -> str:
    return json.dumps(payload, separators=(",", ":"))


def success_message(provider: str, token: str) -> str:
    """Return the opener message announcing a successful login."""
    payload = _compact_json({"token": token, "provider": provider})
    return f"authorization:{provider}:success:{payload}"


def error_message(provider: str, message: str) -> str:
    """Return the opener message announcing a failed login."""
    return f"authorization:{provider}:error:{_compact_json({'error': message})}"


def _page(title: str, body: str, script: str) -> str:
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>{html.escape(title)}</title>
</head>
<body>
    {body}
    <script>
{script}
    </script>
</body>
</html>
"""


def render_success_page(provider: str, token: str, delay_ms: int = 100) -> str:
    """Return HTML that hands the token to the opener, then closes the popup.

    Posts "authorizing" first, then the success message after delay_ms.
    Does nothing when the page has no opener.
    """
    script = f"""      (function () {{
        if (!window.opener) return;
        window.opener.postMessage({_js_string(f"authorizing:{provider}")}, "*");
        setTimeout(function () {{
          window.opener.postMessage({_js_string(success_message(provider, token))}, "*");
          window.close();
        }}, {int(delay_ms)});
      }})();"""
    return _page("Authorized", "<p>Authorization complete. You can close this window.</p>", script)


def render_error_page(provider: str, message: str) -> str:
    """Return HTML that reports an error to the opener and stays open."""
    script = f"""      if (window.opener) {{
        window.opener.postMessage({_js_string(error_message(provider, message))}, "*");
      }}"""
    body = f"<p>Authorization failed: {html.escape(message)}</p>"
    return _page("Authorization failed", body, script)
