LOG_FMT = "[{id}] {message}"


def get_session_id(state):
    session_id = getattr(state, "session_id", None) or "UNKNOWN"
    return session_id


def hide_secrets(config, fields=("password", "bind_password")):
    """
    Return a copy of a (possibly nested) configuration dictionary that
    is safe to log: values of the given fields are replaced.
    """
    return {
        key: "<hidden>" if key in fields else (
            hide_secrets(value, fields) if isinstance(value, dict) else value
        )
        for key, value in config.items()
    }
