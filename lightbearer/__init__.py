"""
Lightbearer — Community Backend for Destiny Rising
====================================================
Task tracker, weapon & build database, news board, looking-for-group board,
clan recruitment listings, achievements, profile cosmetics and leaderboard
ingestion, served as a JSON API over a relational store.

Package layout::

    lightbearer/
    ├── config.py          # YAML → typed Python config
    ├── constants.py       # Enumerations, allow-lists, rarity rules
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine + session helper
    │   ├── models.py      # All ORM models
    │   └── seed.py        # Default task catalogue
    ├── services/
    │   ├── errors.py          # ServiceError hierarchy (400/403/404)
    │   ├── build_service.py   # Build graph create/replace/delete
    │   ├── vote_service.py    # Transactional vote toggle (builds + news)
    │   ├── comment_service.py # Comment threads
    │   ├── news_service.py    # News posts
    │   ├── listing_service.py # LFG + clan recruitment
    │   ├── weapon_service.py  # Weapon catalog + link tables
    │   ├── mod_service.py     # Weapon mod catalog + filter composition
    │   ├── catalog_service.py # Perks, traits, catalysts, mod attributes
    │   ├── task_service.py    # Task templates + per-user completion
    │   ├── achievement_service.py # Badges + manual grants
    │   ├── profile_service.py # Display title, name effect, colour
    │   ├── api_key_service.py # Static bearer keys
    │   └── leaderboard_service.py # Snapshot ingestion
    └── api/
        ├── main.py        # FastAPI app
        ├── auth.py        # Discord OAuth2 → session token
        ├── deps.py        # Principal + admin dependencies
        ├── errors.py      # {"error": ...} exception handlers
        └── routes/        # One router per resource
"""

__version__ = "1.0.0"
