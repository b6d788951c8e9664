# Vulture whitelist for intentionally unused variables
# These are required by framework signatures and cannot be removed

# Pydantic validators require 'cls' parameter
_.cls  # unused variable (Pydantic @classmethod validators)

# SQLAlchemy slow-query listeners are registered by decorator
_._start_timer  # event listener
_._check_duration  # event listener

# ARQ worker settings attributes
_.cron_jobs  # read by arq.run_worker
_.redis_settings  # read by arq.run_worker

# Model imports are required for SQLAlchemy table registration
_.models  # unused import (SQLAlchemy model registration)
_.models_notification  # unused import (SQLAlchemy model registration)

# FastAPI route handlers are registered by decorator
_.lifespan  # FastAPI lifespan hook
_.log_requests  # HTTP middleware
