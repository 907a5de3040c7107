from club_ledger.models.match import Match
from club_ledger.models.player import Player
from club_ledger.models.booking import Booking
from club_ledger.models.revenue import RevenueEntry
from club_ledger.models.setting import Setting

__all__ = ["Match", "Player", "Booking", "RevenueEntry", "Setting"]
