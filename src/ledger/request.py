"""
The per-request object of the ledger application.

A LedgerRequest is built once per HTTP or command-line invocation. It parses
the incoming parameters, works out the run mode, script, action and session
cookie, and owns the database connection for the lifetime of the request.
Business scripts receive it and use ``call_procedure`` for all database work.
"""
import html
import logging
import os
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

import psycopg2

from auth.credentials import get_credentials
from auth.gate import SessionGate
from database import settings as db_settings
from database.connection import ConnectionFactory, close_quietly, make_connection_factory
from database.errors import report_database_error
from database.procedures import call_procedure as invoke_procedure
from i18n import LocaleHandle, get_handle
from session.backends import SessionStore
from session.manager import get_session_store

from . import __version__
from .config import LedgerConfig, get_config
from .errors import ProcedureError, RequestAbort, RequestFinalized
from .params import FORM_CONTENT_TYPE, company_from_cookie, join_query, normalize_action, parse_cookies, parse_query
from .run_mode import RunMode
from .user import UserPreferences, fetch_preferences

logger = logging.getLogger('ledger.request')

LOGIN_SCRIPT = "login"
ALLOWED_METHODS = ("HEAD", "GET", "POST")
ROLE_PROCEDURE = "ledger__is_allowed_role"

_CONTAINER_TYPES = (dict, list, tuple, set)


class LedgerRequest:
    """
    Request state plus the parameters merged into it.

    Parameters live in ``params`` and are reachable with mapping syntax
    (``request["id"]``, ``"id" in request``, ``request.get("id")``).
    """

    def __init__(
        self,
        source: Any = None,
        *,
        environ: Optional[Mapping[str, str]] = None,
        config: Optional[LedgerConfig] = None,
        session_store: Optional[SessionStore] = None,
        connection_factory: Optional[ConnectionFactory] = None,
        body: Optional[str] = None,
    ):
        """
        Args:
            source: Raw query string, an open database connection, or None to
                read ``QUERY_STRING`` (and ``body``) from the environment
            environ: CGI-style environment; defaults to ``os.environ``
            config: Application configuration; defaults to ``get_config()``
            session_store: Store for session and form tokens; defaults to the
                configured backend
            connection_factory: Opens a connection for ``(company, credentials)``
            body: URL-encoded request body of a form POST

        Raises:
            RequestAbort: Unknown request method, malformed script path, or a
                default locale that cannot be loaded
        """
        self.environ: Dict[str, str] = dict(os.environ if environ is None else environ)
        self.config = config if config is not None else get_config()
        self.run_mode = RunMode.from_environ(self.environ)
        logger.debug(f"Begin request: run_mode={self.run_mode.value} source={type(source).__name__}")

        self.credentials = get_credentials(self.environ, self.run_mode)
        self.login: Optional[str] = self.credentials.login

        self.params: Dict[str, Any] = {}
        self.dbh = None
        self._owns_dbh = False
        self.query_string: Optional[str] = None
        if source is not None and not isinstance(source, str):
            self.dbh = source
            logger.info("Using database handle supplied by the caller")
        else:
            self._process_argstr(source, body)

        self.version = __version__
        self.dbversion = __version__
        self.have_latex = self.config.have_latex

        self.cookie: Optional[str] = None
        self.session_id: Optional[str] = None
        self.new_cookie: Optional[str] = None
        self.user: Optional[UserPreferences] = None
        self.role_prefix: Optional[str] = None
        self.warn_expire: Any = None
        self.pw_expires: Any = None
        self.custom_db_fields: Dict[str, List[str]] = {}
        self.company_config: Dict[str, Any] = {}

        self._connection_factory = connection_factory
        self._session_store = session_store
        self._gate: Optional[SessionGate] = None

        self.locale: LocaleHandle = self._load_locale(self.config.default_language)
        self._set_action()
        self.script = self._script_name()
        self.method = self.request_method()
        self._process_cookies()

        logger.debug(f"End request setup: script={self.script} action={self.action}")

    # -- parameter bag -------------------------------------------------

    def __getitem__(self, key: str) -> Any:
        return self.params[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self.params[key] = value

    def __delitem__(self, key: str) -> None:
        del self.params[key]

    def __contains__(self, key: object) -> bool:
        return key in self.params

    def get(self, key: str, default: Any = None) -> Any:
        return self.params.get(key, default)

    @property
    def company(self) -> Optional[str]:
        return self.params.get("company")

    @company.setter
    def company(self, value: Optional[str]) -> None:
        self.params["company"] = value

    @property
    def action(self) -> str:
        return self.params.get("action") or ""

    @property
    def form_id(self) -> Any:
        return self.params.get("form_id")

    @form_id.setter
    def form_id(self, value: Any) -> None:
        if value is None:
            self.params.pop("form_id", None)
        else:
            self.params["form_id"] = value

    def merge(self, src: Mapping[str, Any], keys: Optional[Iterable[str]] = None, index: Any = None) -> None:
        """
        Copy ``src`` into the request parameters.

        Args:
            src: Source mapping
            keys: Only these keys are copied; missing ones are set to None
            index: When given, ``key`` is stored as ``key_<index>``; 0 and "0" count as no index
        """
        keys = list(keys) if keys else list(src.keys())
        for key in keys:
            dst_key = key if index in (None, "", 0, "0") else f"{key}_{index}"
            self.params[dst_key] = src.get(key)
        logger.debug(f"Merged {len(keys)} key(s), index={index}")

    def set(self, **kwargs: Any) -> bool:
        self.params.update(kwargs)
        return True

    def remove_cgi_globals(self) -> None:
        """Drop parameters whose name starts with ``.``."""
        for key in [k for k in self.params if k.startswith(".")]:
            del self.params[key]

    def take_top_level(self) -> Dict[str, Any]:
        """Parameters holding plain values, excluding ``.``-prefixed names."""
        return {
            key: value
            for key, value in self.params.items()
            if not isinstance(value, _CONTAINER_TYPES) and not key.startswith(".")
        }

    def unescape(self, text: str) -> str:
        return html.unescape(text)

    def fix_translation(self, obj: Any, tag: str) -> Any:
        """Translate ``obj[tag]`` in place when ``obj`` is a mapping holding ``tag``."""
        if isinstance(obj, dict) and tag in obj and self.locale is not None:
            obj[tag] = self.locale.text(obj[tag])
        return obj

    # -- initialization steps ------------------------------------------

    def _process_argstr(self, argstr: Optional[str], body: Optional[str]) -> None:
        if argstr is None:
            argstr = self.environ.get("QUERY_STRING", "")
            if body and self.environ.get("CONTENT_TYPE", "").startswith(FORM_CONTENT_TYPE):
                argstr = join_query(argstr, body)
        self.query_string = argstr
        self.merge(parse_query(argstr))

        # empty values are stored as NULL by the procedures
        for key, value in self.params.items():
            if value == "":
                self.params[key] = None

    def _load_locale(self, language: Optional[str]) -> LocaleHandle:
        locale = get_handle(language, self.config.locale_dir)
        if locale is None:
            self.error(f"Locale ({language}) not loaded")
        return locale

    def _set_action(self) -> None:
        self.params["action"] = normalize_action(self.params.get("action"))

    def _script_name(self) -> str:
        script_name = self.environ.get("SCRIPT_NAME")
        if not script_name:
            return LOGIN_SCRIPT
        path = script_name.split("?", 1)[0]
        if ".." in path or "\\" in path:
            logger.error(f"Rejected script path {script_name!r}")
            self.error("Access Denied", status=403)
        return path.rstrip("/").rsplit("/", 1)[-1] or LOGIN_SCRIPT

    def request_method(self) -> str:
        """
        The validated request method.

        Raises:
            RequestAbort: Method unset or not one of HEAD, GET, POST in a
                network run mode
        """
        method = self.environ.get("REQUEST_METHOD")
        if not method and self.run_mode is RunMode.CLI:
            return "GET"
        if method not in ALLOWED_METHODS:
            self.error("Request method unset or set to unknown value", status=405)
        return method

    def _process_cookies(self) -> None:
        # a plain GET of the login page must not reuse a stale session
        if self.method == "GET" and self.script == LOGIN_SCRIPT and self.action in ("", "authenticate"):
            self.cookie = ""
            return

        cookies = parse_cookies(self.environ.get("HTTP_COOKIE")) if self.run_mode.is_network else {}
        self.cookie = cookies.get(self.config.cookie_name)

        if not self.company and self.cookie:
            company = company_from_cookie(self.cookie)
            if company:
                self.company = company

    # -- run mode and session -------------------------------------------

    def is_run_mode(self, *modes: str) -> bool:
        """True when the current run mode is any of ``cli``, ``cgi``/``gateway``, ``embedded``."""
        for mode in modes:
            try:
                if RunMode.parse(mode) is self.run_mode:
                    return True
            except ValueError:
                logger.warning(f"Unknown run mode {mode!r}")
        return False

    @property
    def gate(self) -> SessionGate:
        if self._gate is None:
            store = self._session_store or get_session_store(self.config, call=self.call_procedure)
            self._gate = SessionGate(self, store)
        return self._gate

    def verify_session(self) -> bool:
        return self.gate.verify_session()

    def open_form(self, commit: bool = False) -> bool:
        return self.gate.open_form(commit=commit)

    def check_form(self) -> bool:
        return self.gate.check_form()

    def close_form(self) -> bool:
        return self.gate.close_form()

    # -- database --------------------------------------------------------

    def db_init(self) -> bool:
        """
        Make sure the request holds a database connection.

        The company defaults to ``DEFAULT_DB``. Returns False when no company
        is known, a network request carries no login, or the connection is
        refused.
        """
        if not self.company:
            self.company = self.config.default_db
        if self.dbh is not None:
            return True
        if not self.company:
            logger.error("No company database selected")
            return False
        if not self.login and self.run_mode.is_network:
            logger.error(f"Refusing to connect to {self.company} without a login")
            return False

        factory = self._connection_factory or make_connection_factory(self.config)
        try:
            self.dbh = factory(self.company, self.credentials)
        except psycopg2.OperationalError as e:
            logger.error(f"Could not connect to {self.company} as {self.login}: {e}")
            return False
        self._owns_dbh = True
        return True

    def _require_dbh(self) -> None:
        if self.dbh is None and not self.db_init():
            self.error("Could not connect to database", status=500)

    def call_procedure(
        self,
        funcname: Optional[str] = None,
        args: Optional[List[Any]] = None,
        funcschema: Optional[str] = None,
        procname: Optional[str] = None,
        continue_on_error: bool = False,
    ) -> List[Dict[str, Any]]:
        """
        Call a stored procedure on the request's connection.

        Args:
            funcname: Procedure name (``procname`` is accepted as an alias)
            args: Positional arguments: values, lists, or ``{"value", "type"}`` pairs
            funcschema: Schema; defaults to ``DB_NAMESPACE``
            continue_on_error: Return no rows instead of aborting on failure

        Returns:
            Result rows as dictionaries

        Raises:
            RequestAbort: The call failed, reported through ``dberror``
        """
        funcname = funcname or procname
        if not funcname:
            raise ValueError("call_procedure needs a funcname")
        self._require_dbh()
        try:
            return invoke_procedure(
                self.dbh,
                funcname,
                args or [],
                funcschema=funcschema or self.config.db_namespace,
                continue_on_error=continue_on_error,
            )
        except ProcedureError as e:
            self.dberror(e)

    def dberror(self, error: ProcedureError) -> None:
        """Log the failure and abort with a localized message."""
        report_database_error(error, self.locale, self.dbh)

    def initialize_with_db(self) -> None:
        """Load company and user configuration once the connection is known."""
        self._require_dbh()

        self.role_prefix = self._load_setting(db_settings.fetch_role_prefix)
        expiry = self._load_setting(db_settings.fetch_password_expiry)
        self.warn_expire = expiry["warn_expire"]
        self.pw_expires = expiry.get("pw_expires")
        self.custom_db_fields = self._load_setting(db_settings.fetch_custom_fields)
        self.company_config = self._load_setting(db_settings.fetch_company_settings)

        self.get_user_info()
        self.locale = self._load_locale(self.user.language)

        if not self.params.get("stylesheet"):
            self.params["stylesheet"] = self.user.stylesheet

    def _load_setting(self, fetch: Callable[[Any], Any]) -> Any:
        try:
            return fetch(self.dbh)
        except psycopg2.Error as e:
            message = (e.pgerror or str(e)).strip()
            self.dberror(ProcedureError(fetch.__name__, e.pgcode, message))

    def get_user_info(self) -> UserPreferences:
        self.user = fetch_preferences(self.call_procedure, self.login)
        return self.user

    def is_allowed_role(self, allowed_roles: Iterable[str]) -> bool:
        """True when the user holds any of ``allowed_roles``."""
        rows = self.call_procedure(funcname=ROLE_PROCEDURE, args=[list(allowed_roles)])
        return bool(rows and rows[0].get(ROLE_PROCEDURE))

    # -- termination -----------------------------------------------------

    def error(self, message: str, status: int = 500) -> None:
        raise RequestAbort(message, status)

    def close(self) -> None:
        """Release the database connection if this request opened it."""
        if self.dbh is not None and self._owns_dbh:
            close_quietly(self.dbh)
        self.dbh = None
        self._owns_dbh = False

    def finalize_request(self) -> None:
        """Release request state and unwind to the top-level handler."""
        self.close()
        raise RequestFinalized()

    def __repr__(self) -> str:
        return f"LedgerRequest(script={self.script!r}, action={self.action!r}, company={self.company!r}, run_mode={self.run_mode.value})"
