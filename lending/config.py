import os


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    # Database configuration
    DATABASE_URL: str = os.environ.get('LENDING_DATABASE_URL') or 'sqlite:///library.db'
    SQLITE_BUSY_TIMEOUT: float = float(os.environ.get('LENDING_SQLITE_BUSY_TIMEOUT', '30'))
    SQL_ECHO: bool = _env_bool('LENDING_SQL_ECHO')

    # Lending rules
    LOAN_PERIOD_DAYS: int = 14  # due_date = borrowed_at + 14 days

    # Logging
    LOG_LEVEL: str = os.environ.get('LENDING_LOG_LEVEL', 'INFO')
    ALERT_LOGGER: str = 'lending.alerts'  # audit gaps are reported here
