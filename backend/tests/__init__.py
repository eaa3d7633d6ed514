# Register SQLModel tables at test discovery time, before any test engine creates them
from season_engine.database import register_models

register_models()
