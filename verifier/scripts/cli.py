from __future__ import annotations

import argparse
import logging
import sys

from verifier.core.deps import build_verifier
from verifier.core.errors import VerificationError


def _init_db() -> None:
    from verifier.db.session import Base, engine
    from verifier.models.verification_request import VerificationRequestRecord

    Base.metadata.create_all(bind=engine, tables=[VerificationRequestRecord.__table__])


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="verifier", description="Issue and check one-time verification secrets.")
    parser.add_argument("-v", "--verbose", action="store_true", help="log at DEBUG level")
    sub = parser.add_subparsers(dest="command", required=True)

    email = sub.add_parser("email", help="send an email verification link")
    email.add_argument("recipient")
    email.add_argument("--subject", default="")

    mobile = sub.add_parser("mobile", help="send an SMS one-time code")
    mobile.add_argument("recipient")

    verify = sub.add_parser("verify", help="check a secret against the latest pending request")
    verify.add_argument("channel", choices=["email", "mobile"])
    verify.add_argument("recipient")
    verify.add_argument("secret")

    sub.add_parser("init-db", help="create the verification_requests table")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    if args.command == "init-db":
        _init_db()
        print("verification_requests table is ready")
        return 0

    verifier = build_verifier()
    try:
        if args.command == "email":
            request = verifier.new_email(args.recipient, args.subject)
            print(f"sent: id={request.id} expires_at={request.secret_expiry.isoformat()}")
        elif args.command == "mobile":
            request = verifier.new_mobile(args.recipient)
            print(f"sent: id={request.id} expires_at={request.secret_expiry.isoformat()}")
        else:
            request = verifier.verify_secret(args.channel, args.recipient, args.secret)
            print(f"verified: id={request.id}")
    except VerificationError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
