import argparse
import sys

from avatar_pipeline.config.settings import Settings
from avatar_pipeline.database.connection import close_pool, init_pool
from avatar_pipeline.imaging.exceptions import ImageSourceError
from avatar_pipeline.imaging.loader import LocalImageLoader
from avatar_pipeline.logging.logger import Log
from avatar_pipeline.upload.models import UploadOptions, UploadProgressEvent
from avatar_pipeline.upload.orchestrator import AvatarUploader, build_uploader


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="avatar-pipeline")
    commands = parser.add_subparsers(dest="command", required=True)

    upload = commands.add_parser("upload", help="Upload an image as a user's avatar")
    upload.add_argument("path")
    upload.add_argument("--user-id", required=True)
    upload.add_argument("--no-compress", action="store_true")
    upload.add_argument("--thumbnail", action="store_true")
    upload.add_argument("--quality", type=float, default=0.8)
    upload.add_argument("--max-size", type=int, default=400)

    remove = commands.add_parser("remove", help="Delete every stored avatar object for a user")
    remove.add_argument("--user-id", required=True)
    remove.add_argument("--clear-profile", action="store_true")

    reconcile = commands.add_parser(
        "reconcile", help="Point the profile at the stored avatar if it drifted"
    )
    reconcile.add_argument("--user-id", required=True)
    return parser


def _log_progress(event: UploadProgressEvent) -> None:
    Log.info(f"[{event.progress:3d}%] {event.stage.value}: {event.message}")


def run(args: argparse.Namespace, uploader: AvatarUploader) -> int:
    """Execute one parsed command. Returns the process exit code."""
    if args.command == "upload":
        try:
            image = LocalImageLoader().load(args.path)
        except (FileNotFoundError, ImageSourceError) as exc:
            Log.error(str(exc))
            return 1
        result = uploader.upload(
            image,
            UploadOptions(
                user_id=args.user_id,
                compress=not args.no_compress,
                generate_multiple_sizes=args.thumbnail,
                quality=args.quality,
                max_size=args.max_size,
            ),
            on_progress=_log_progress,
        )
        if not result.success:
            Log.error(f"Upload failed: {result.error}")
            return 1
        Log.info(f"Avatar URL: {result.avatar_url}")
        if result.thumbnail_url:
            Log.info(f"Thumbnail URL: {result.thumbnail_url}")
        if not result.profile_updated:
            Log.warning(
                f"Profile for user {args.user_id} was not updated; "
                "run `avatar-pipeline reconcile` once the profile exists"
            )
        return 0

    if args.command == "remove":
        removal = uploader.remove_avatar(args.user_id, clear_profile=args.clear_profile)
        if not removal.success:
            Log.error(f"Removal failed: {removal.error}")
            return 1
        return 0

    try:
        changed = uploader.reconcile_profile(args.user_id)
    except Exception as exc:
        Log.error(f"Reconciliation failed: {exc}")
        return 1
    Log.info("Profile updated" if changed else "Profile already consistent")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point: parse args -> initialize pool -> build uploader -> run command."""
    args = build_parser().parse_args(argv)
    settings = Settings()
    Log.configure(settings.log_level)
    init_pool(settings)

    try:
        return run(args, build_uploader(settings))
    finally:
        close_pool()


if __name__ == "__main__":
    sys.exit(main())
