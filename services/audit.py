from models import SystemLog


def log_action(session, action, details, user_id=None):
    """Stage a system log entry; the caller's commit persists it."""
    entry = SystemLog(action=action, details=details, user_id=user_id)
    session.add(entry)
    return entry
