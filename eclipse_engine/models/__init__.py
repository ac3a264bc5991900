from eclipse_engine.models.base import Base  # noqa: F401
from eclipse_engine.models.combat_log import CombatLog  # noqa: F401
from eclipse_engine.models.match import Match, MatchStatus  # noqa: F401
from eclipse_engine.models.match_action import MatchAction  # noqa: F401
from eclipse_engine.models.player_economy import PlayerEconomyRecord  # noqa: F401
from eclipse_engine.models.ship import ShipRecord  # noqa: F401
