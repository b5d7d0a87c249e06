"""
Create (or promote) a staff account from the command line.

Self-registration only ever creates trainees, so the first admin has to be
bootstrapped here. Uses the app's SQLAlchemy engine and DATABASE_URL.

    python scripts/create_user.py admin@example.com s3cret --role admin
"""

import argparse
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from app.db.session import SessionLocal, create_db
from app.models.user import User, RoleEnum
from app.services.auth import get_password_hash


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("email")
    parser.add_argument("password")
    parser.add_argument("--role", choices=[r.value for r in RoleEnum], default=RoleEnum.admin.value)
    parser.add_argument("--first-name", default="")
    parser.add_argument("--last-name", default="")
    args = parser.parse_args(argv)

    create_db()
    db = SessionLocal()
    try:
        user = db.query(User).filter(User.email == args.email).first()
        if user is None:
            user = User(email=args.email, first_name=args.first_name, last_name=args.last_name)
            db.add(user)
            action = 'CREATED'
        else:
            action = 'UPDATED'
        user.password_hash = get_password_hash(args.password)
        user.role = RoleEnum(args.role)
        user.is_active = True
        db.commit()
        print(action, user.email, user.role.value)
    finally:
        db.close()


if __name__ == "__main__":
    main()
