"""Runtime check — declarative startup checks run before an app starts serving."""

from .app_config import AppConfigStore, get_app_config, set_app_config
from .check import IGNORE, Check, CheckFault, Error, Ok, Outcome, Report, Status, evaluate
from .dsl import app_var, check, env_var, feature_check
from .flags import EnvFlagStore, FlagStore, InMemoryFlagStore, get_flag_store, set_flag_store
from .gate import RuntimeCheck, RuntimeCheckFailed, run
