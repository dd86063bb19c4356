# Force SQLModel table registration at test discovery time
# This ensures the snapshot table is registered before any test database creation
from kendo_bracket.models.tournament import TournamentSnapshot  # noqa: F401
