# uptimebot

Watch HTTP endpoints, record when they go up or down, and tell people about it.

uptimebot is a library of the building blocks for an uptime-monitoring web
service: a monitoring engine, SQLite storage for targets and notifiers,
Slack notifications, and WSGI middleware for CSRF protection and flash
messages.

## What is in it

- **Monitoring engine** (`uptimebot.monitor`): a `Target` is checked with an
  HTTP GET. A response below 400 sets its status to `Status.UP`, 400 or above
  to `Status.DOWN` (and raises `CheckError`), a connection failure to
  `Status.ERROR` (and raises `CheckError`). A timeout raises `CheckTimeout`
  and leaves the status alone. When the status changes, `status_changed_at`
  is stamped and the target's `on_status_update` callback is called. A
  `Manager` runs each registered target in a background thread at its
  interval, checking it only while it is enabled, until it is stopped with
  `Manager.revoke` or everything is shut down with `Manager.stop`.
  `Manager.register` raises `ValueError` for a target that is already
  monitored or has no positive interval.
- **Targets per user** (`uptimebot.user_target`, `uptimebot.target_repository`,
  `uptimebot.target_service`): `UserTarget` ties a target to its owner and
  exposes the target's fields directly. `TargetRepository` stores targets in
  SQLite and raises `TargetNotFoundError` (a `TargetRepositoryError`) for
  missing ones. `TargetService` adds input validation, ownership checks, a
  limit of five targets per user, and keeps the running monitors in step with
  what is stored. Its errors are `UnauthorizedError`, `TargetMissingError`,
  `InvalidInputError` and `TargetLimitReachedError`, all subclasses of
  `TargetServiceError`.
- **Notifications** (`uptimebot.observer`, `uptimebot.notifier`,
  `uptimebot.slack`, `uptimebot.notifier_repository`,
  `uptimebot.notifier_service`): a `Subject` passes each `State` to its
  attached observers and returns the exceptions they raised. `SlackObserver`
  posts a colour-coded message (built by `build_payload`) to a Slack incoming
  webhook and raises `SlackNotifyError` on failure. A `Notifier` holds a
  target's channel configuration as JSON text, typed `NotifierType.SLACK` or
  `NotifierType.EMAIL`; `Notifier.slack_config` and `Notifier.email_config`
  parse it. `NotifierRepository` stores notifiers in SQLite, and
  `NotifierService` builds observers from them and completes the Slack OAuth
  code exchange.
- **Web pieces** (`uptimebot.csrf`, `uptimebot.flash`,
  `uptimebot.notifier_handler`): `CsrfMiddleware` sets a `csrf_token` cookie on
  GET, HEAD and OPTIONS requests that lack one, and answers other requests
  with 403 unless the `X-CSRF-Token` header, or failing that the `csrf_token`
  form field, matches the cookie. `csrf_field` renders the hidden form input
  for a werkzeug `Request`. `FlashMiddleware` gives each browser a `flash_id`
  cookie and makes it the current flash id during the request; `FlashStore`
  keeps error and success messages for it that are removed once read.
  `NotifierHandler` returns werkzeug `Response` objects for the "add to Slack"
  redirect and its callback.

## Wiring a WSGI application

```python
from uptimebot.csrf import CsrfMiddleware
from uptimebot.flash import FlashMiddleware

application = FlashMiddleware(CsrfMiddleware(app))
```

Inside a request, `FlashStore.set_errors` and `FlashStore.set_successes` store
messages for the current visitor, and `FlashStore.get_errors` and
`FlashStore.get_successes` return them once and forget them. Outside a request
`flash_context` sets the flash id by hand.

## Storage

Both repositories take a `sqlite3` connection. Create the tables first:

```python
import sqlite3

from uptimebot.schema import create_schema
from uptimebot.target_repository import TargetRepository
from uptimebot.notifier_repository import NotifierRepository

db = sqlite3.connect("uptimebot.db", check_same_thread=False)
create_schema(db)
targets = TargetRepository(db)
notifiers = NotifierRepository(db)
```

`create_schema` also turns on foreign-key enforcement, so a notifier must
belong to an existing target and is removed with it.

## Monitoring

```python
from datetime import timedelta

from uptimebot.notifier_service import NotifierService
from uptimebot.target_service import TargetService

notifier_service = NotifierService(notifiers, None)
service = TargetService(targets, notifier_service)
service.initialize_monitoring()

created = service.create(1, "https://example.com", timedelta(seconds=60))
service.toggle_enabled(created.id, 1)
```

New targets start enabled with status `pending`. Every status change is
written back to the database and sent to the Slack notifiers configured for
that target.

## Slack

The Slack OAuth flow reads `SLACK_CLIENT_ID`, `SLACK_CLIENT_SECRET` and
`SLACK_REDIRECT_URI` from the environment. `NotifierHandler.auth_slack`
redirects the user to Slack's authorisation page with `target_id` in the
OAuth state. `NotifierHandler.auth_slack_callback` reads the target id back
with `NotifierService.parse_oauth_state`, exchanges the code for a webhook
with `NotifierService.handle_slack_callback`, stores a new Slack notifier and
redirects to `/targets/<id>`.

## What it does not do

- There is no command and no server: the package provides handlers and
  middleware, and you supply the WSGI application, routing and server.
- There are no user accounts, login or sessions; user ids are plain integers
  passed in by the caller.
- There are no HTML pages or templates; `NotifierHandler` is the only
  handler, and it answers with redirects or plain-text errors.
- E-mail notifiers can be stored, but nothing sends e-mail:
  `NotifierService.configure_observers` raises `NotifierServiceError` for any
  notifier that is not a Slack one.