"""HTML pages for login and the booking planning."""

import json
from html import escape
from string import Template

from fastapi.responses import HTMLResponse

from apartment_booker.services.people import PeopleDirectory

LOGIN_ERROR = "Mot de passe incorrect."


def render_login(
    *,
    page_title: str,
    base_path: str,
    hint: str,
    error: str = "",
    status_code: int = 200,
) -> HTMLResponse:
    """Render the login form."""
    hint_html = f'<p class="hint">Indice : {escape(hint)}</p>' if hint else ""
    error_html = f'<p class="error">{escape(error)}</p>' if error else ""
    body = _LOGIN_HTML.substitute(
        page_title=escape(page_title),
        action=escape(f"{base_path}/login"),
        hint=hint_html,
        error=error_html,
    )
    return HTMLResponse(body, status_code=status_code)


def render_index(
    *,
    people: PeopleDirectory,
    page_title: str,
    banner_title: str,
    base_path: str,
) -> HTMLResponse:
    """Render the planning page with ``window.APP_CONFIG`` for the bundle."""
    app_config = {"basePath": base_path, "people": people.as_dicts()}
    body = _INDEX_HTML.substitute(
        page_title=escape(page_title),
        banner_title=escape(banner_title),
        static_prefix=escape(f"{base_path}/static"),
        app_config_json=json.dumps(app_config).replace("</", "<\\/"),
    )
    return HTMLResponse(body)


_LOGIN_HTML = Template(
    """<!doctype html>
<html lang="fr">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>$page_title</title>
    <style>
      body { font-family: ui-sans-serif, system-ui, sans-serif; margin: 2rem; }
      .error { color: #b00020; }
      .hint { color: #555; }
      input { padding: 0.4rem 0.6rem; width: 240px; }
    </style>
  </head>
  <body>
    <h1>$page_title</h1>
    <form method="post" action="$action">
      <label for="password">Mot de passe</label><br />
      <input id="password" name="password" type="password" autofocus />
      <button type="submit">Entrer</button>
    </form>
    $hint
    $error
  </body>
</html>
"""
)

_INDEX_HTML = Template(
    """<!doctype html>
<html lang="fr">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>$page_title</title>
    <link rel="stylesheet" href="$static_prefix/css/style.css" />
  </head>
  <body>
    <header class="banner">
      <h1>$banner_title</h1>
      <div id="legend-entries"></div>
    </header>
    <main id="calendar"></main>

    <div id="create-modal" class="modal hidden">
      <div class="modal-card">
        <h2>Nouvelle reservation</h2>
        <p id="create-range"></p>
        <label for="person-select">Qui</label>
        <select id="person-select"></select>
        <label for="create-comment">Commentaire</label>
        <textarea id="create-comment"></textarea>
        <button id="create-cancel" type="button">Annuler</button>
        <button id="create-confirm" type="button">Reserver</button>
      </div>
    </div>

    <div id="delete-modal" class="modal hidden">
      <div class="modal-card">
        <h2>Reservation</h2>
        <p id="delete-description"></p>
        <label for="delete-comment">Commentaire</label>
        <textarea id="delete-comment"></textarea>
        <button id="delete-cancel" type="button">Fermer</button>
        <button id="delete-save" type="button">Enregistrer</button>
        <button id="delete-confirm" type="button">Supprimer</button>
      </div>
    </div>

    <div id="confirm-modal" class="modal hidden">
      <div class="modal-card">
        <p>Supprimer cette reservation ?</p>
        <p id="confirm-message"></p>
        <button id="confirm-back" type="button">Retour</button>
        <button id="confirm-delete" type="button">Supprimer</button>
      </div>
    </div>

    <div id="toast" class="hidden" role="status"></div>

    <script>
      window.APP_CONFIG = $app_config_json;
    </script>
    <script src="$static_prefix/js/app.js"></script>
  </body>
</html>
"""
)
