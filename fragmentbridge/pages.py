"""
Static pages served by the loopback listener.

The bridge page is what the browser loads after the provider redirect. Its
script moves the URL fragment, which never reaches the server, into a POST
to /token. Nothing is templated per request: the state is read by the script
from the page URL, so the output only depends on the locale.
"""

import html
import json
from typing import Dict

from .constants import DEFAULT_LOCALE, TOKEN_PATH

MESSAGES: Dict[str, Dict[str, str]] = {
    'en': {
        'title': 'Authenticator',
        'processing': 'Connecting...',
        'processing_desc': 'Please wait while the application receives the token.',
        'connection_error': 'Connection error',
        'connection_error_desc': 'Could not send the token to the application: ',
        'not_found': 'Token not found',
        'not_found_desc': 'Please go through the login process again.',
        'success': 'Authentication successful!',
        'success_desc': 'The access token was received. You can close this window and return to the application.',
    },
    'vi': {
        'title': 'Authenticator',
        'processing': 'Đang xử lý kết nối...',
        'processing_desc': 'Vui lòng đợi giây lát để ứng dụng nhận token.',
        'connection_error': 'Lỗi kết nối',
        'connection_error_desc': 'Không thể gửi token về ứng dụng: ',
        'not_found': 'Không tìm thấy Token',
        'not_found_desc': 'Vui lòng thực hiện lại quy trình đăng nhập.',
        'success': 'Xác thực thành công!',
        'success_desc': 'Đã nhận được khóa truy cập. Bạn có thể đóng cửa sổ này và quay lại ứng dụng.',
    },
}

_STYLE = """
        body { font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, Helvetica, Arial, sans-serif; display: flex; align-items: center; justify-content: center; height: 100vh; background: #0a0514; color: white; margin: 0; }
        .card { background: rgba(255,255,255,0.05); padding: 2rem; border-radius: 1.5rem; text-align: center; border: 1px solid rgba(255,255,255,0.1); box-shadow: 0 10px 30px rgba(0,0,0,0.5); max-width: 400px; width: 90%; }
        h2 { margin-bottom: 0.5rem; font-weight: 800; }
        h1.success { color: #10b981; }
        p { color: rgba(255,255,255,0.5); font-size: 0.9rem; }
        .spinner { border: 3px solid rgba(255,255,255,0.1); border-top: 3px solid #f59e0b; border-radius: 50%; width: 30px; height: 30px; animation: spin 1s linear infinite; margin: 20px auto; }
        @keyframes spin { 0% { transform: rotate(0deg); } 100% { transform: rotate(360deg); } }
"""


def get_messages( locale: str = DEFAULT_LOCALE ) -> Dict[str, str]:
    """Messages for a locale, English if the locale is unknown."""
    return MESSAGES.get( locale, MESSAGES[ DEFAULT_LOCALE ] )


def _js( value: str ) -> str:
    # JSON string literals are valid JavaScript, "</" is split so the
    # value can't close the script element.
    return json.dumps( value, ensure_ascii = False ).replace( '</', '<\\/' )


def render_bridge_page( locale: str = DEFAULT_LOCALE ) -> str:
    """
    Render the bridge page.

    Args:
        locale: message locale ("en" or "vi")

    Returns:
        The HTML document, identical for every call with the same locale
    """
    msg = get_messages( locale )
    esc = { k: html.escape( v ) for k, v in msg.items() }
    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <title>{esc[ 'title' ]}</title>
    <style>{_STYLE}    </style>
</head>
<body>
    <div class="card">
        <h2 id="status">{esc[ 'processing' ]}</h2>
        <div id="spinner" class="spinner"></div>
        <p id="desc">{esc[ 'processing_desc' ]}</p>
    </div>
    <script>
        var hash = window.location.hash;
        var fragment = hash ? hash.substring(1) : '';
        var state = new URLSearchParams(window.location.search).get('state');
        if (!state && fragment) {{
            state = new URLSearchParams(fragment).get('state');
        }}

        function showError(title, desc) {{
            document.getElementById('status').innerText = title;
            document.getElementById('desc').innerText = desc;
            document.getElementById('spinner').style.display = 'none';
        }}

        if (fragment && fragment.indexOf('access_token') !== -1) {{
            fetch({_js( TOKEN_PATH )} + '?state=' + encodeURIComponent(state || ''), {{
                method: 'POST',
                headers: {{ 'Content-Type': 'text/plain;charset=UTF-8' }},
                body: fragment
            }}).then(function (resp) {{
                return resp.text().then(function (text) {{
                    if (!resp.ok) {{
                        throw new Error(resp.status + ' ' + text);
                    }}
                    history.replaceState(null, '', window.location.pathname);
                    document.open();
                    document.write(text);
                    document.close();
                }});
            }}).catch(function (err) {{
                showError({_js( msg[ 'connection_error' ] )}, {_js( msg[ 'connection_error_desc' ] )} + err);
            }});
        }} else {{
            showError({_js( msg[ 'not_found' ] )}, {_js( msg[ 'not_found_desc' ] )});
        }}
    </script>
</body>
</html>
"""


def render_success_page( locale: str = DEFAULT_LOCALE ) -> str:
    """Render the page returned once the token was relayed to the application."""
    esc = { k: html.escape( v ) for k, v in get_messages( locale ).items() }
    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <title>{esc[ 'title' ]}</title>
    <style>{_STYLE}    </style>
</head>
<body>
    <div class="card">
        <h1 class="success">{esc[ 'success' ]}</h1>
        <p>{esc[ 'success_desc' ]}</p>
    </div>
</body>
</html>
"""
