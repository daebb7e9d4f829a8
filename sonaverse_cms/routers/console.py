"""Admin console pages (HTML shells).

Every page except the login form sits behind the route guard, so the
handlers can rely on request.state.user being set.
"""

from __future__ import annotations

import html
import logging
from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from sonaverse_cms.auth.tokens import TokenClaims
from sonaverse_cms.errors import NotFound

log = logging.getLogger("sonaverse-cms.console")

router = APIRouter(prefix="/admin", tags=["console"], include_in_schema=False)

SECTIONS: dict[str, str] = {
    "press": "언론보도",
    "sonaverse-story": "소나버스 스토리",
    "products": "제품",
    "pages": "페이지",
    "inquiries": "문의",
    "analytics": "방문 통계",
    "settings": "사이트 설정",
    "users": "관리자 계정",
}


def _html_headers() -> dict[str, str]:
    return {
        "Cache-Control": "no-store, max-age=0",
        "Pragma": "no-cache",
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "Referrer-Policy": "same-origin",
    }


_LOGIN_HTML = """\
<!doctype html>
<html lang="ko">
<head>
  <meta charset="utf-8"/>
  <meta name="viewport" content="width=device-width,initial-scale=1"/>
  <title>Sonaverse Admin - 로그인</title>
</head>
<body>
  <main>
    <h1>Sonaverse 관리자 로그인</h1>
    <form id="login-form">
      <label>이메일 <input type="email" name="email" autocomplete="username" required/></label>
      <label>비밀번호 <input type="password" name="password" autocomplete="current-password" required/></label>
      <button type="submit">로그인</button>
      <p id="login-error" role="alert"></p>
    </form>
  </main>
  <script>
    const form = document.getElementById("login-form");
    form.addEventListener("submit", async (event) => {
      event.preventDefault();
      const body = {email: form.email.value, password: form.password.value};
      const res = await fetch("/api/auth/login", {
        method: "POST",
        headers: {"Content-Type": "application/json"},
        credentials: "include",
        body: JSON.stringify(body),
      });
      const data = await res.json().catch(() => ({}));
      if (!res.ok || !data.success) {
        document.getElementById("login-error").textContent = data.error || "";
        return;
      }
      sessionStorage.setItem("admin_authenticated", "true");
      const target = new URLSearchParams(location.search).get("returnUrl") || "";
      const isAdmin = target === "/admin" || target.startsWith("/admin/");
      location.replace(isAdmin && !target.startsWith("//") ? target : "/admin");
    });
  </script>
</body>
</html>
"""


def _shell(user: Optional[TokenClaims], section: Optional[str]) -> str:
    nav = "\n".join(
        f'      <li><a href="/admin/{key}">{html.escape(label)}</a></li>'
        for key, label in SECTIONS.items()
    )
    title = SECTIONS.get(section or "", "대시보드")
    username = html.escape(user.username) if user else ""
    return f"""\
<!doctype html>
<html lang="ko">
<head>
  <meta charset="utf-8"/>
  <meta name="viewport" content="width=device-width,initial-scale=1"/>
  <title>Sonaverse Admin - {html.escape(title)}</title>
</head>
<body data-section="{html.escape(section or 'dashboard')}">
  <nav>
    <a href="/admin">대시보드</a>
    <ul>
{nav}
    </ul>
    <span class="user">{username}</span>
    <a href="/api/auth/logout">로그아웃</a>
  </nav>
  <main id="app"><h1>{html.escape(title)}</h1></main>
  <script>
    if (!sessionStorage.getItem("admin_authenticated")) {{
      sessionStorage.setItem("admin_authenticated", "true");
    }}
  </script>
</body>
</html>
"""


@router.get("/login", response_class=HTMLResponse)
async def login_page() -> HTMLResponse:
    """Login form. Authenticated users are redirected away by the route guard."""
    return HTMLResponse(_LOGIN_HTML, headers=_html_headers())


@router.get("", response_class=HTMLResponse)
async def dashboard(request: Request) -> HTMLResponse:
    user = getattr(request.state, "user", None)
    return HTMLResponse(_shell(user, None), headers=_html_headers())


@router.get("/{section}", response_class=HTMLResponse)
async def section_page(request: Request, section: str) -> HTMLResponse:
    if section not in SECTIONS:
        raise NotFound()
    user = getattr(request.state, "user", None)
    return HTMLResponse(_shell(user, section), headers=_html_headers())
