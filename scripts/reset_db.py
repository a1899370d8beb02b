# scripts/reset_db.py
# Drops and recreates the campaign table. Every campaign, in every status, is lost.

import sys, os
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from sqlmodel import SQLModel

from phishsim import models  # noqa: F401  registers the campaign table
from phishsim.database import engine

SQLModel.metadata.drop_all(engine)
SQLModel.metadata.create_all(engine)

print(f"✅ Campaign table reset on {engine.url.render_as_string(hide_password=True)}.")
