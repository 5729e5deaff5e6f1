"""
Basic usage example for logrota.

Writes a handful of records to ./logs/example.log with size rotation at 1K,
then prints the rotation status. Run it twice to see rotated files appear.
"""

from pathlib import Path

from logrota import Settings, get_logger


def main() -> None:
    """Demonstrate buffered logging with size rotation."""

    settings = Settings(
        file=str(Path("logs") / "example"),
        level=0,
        rotation=True,
        rotation_type="size",
        max_size="1K",
        keep_days=7,
        buffer_size=5,
        name="example",
    )
    logger = get_logger(settings=settings)

    logger.debug("Debug message")
    logger.info("Application started")
    logger.warn("Disk usage above 80%")
    logger.error("Upstream request failed")

    for i in range(40):
        logger.info(f"Processed batch {i}")

    # Force a rotation regardless of size
    result = logger.rotate_now()
    if result is not None and result.path is not None:
        print(f"Rotated into {result.path}")

    logger.flush()
    print(logger.rotation_status())
    logger.close()


if __name__ == "__main__":
    main()
