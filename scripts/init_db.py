# 📄 File: scripts/init_db.py

from phishsim.database import init_db

if __name__ == "__main__":
    init_db()
    print("✅ Tables created.")

# python3 -m scripts.init_db
