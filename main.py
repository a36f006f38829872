import asyncio
import logging
import sys

from dotenv import load_dotenv

from popcorn.core.config import get_settings
from popcorn.services.controller import controller_lifespan

load_dotenv()


async def run(query: str) -> None:
    settings = get_settings()
    async with controller_lifespan(settings) as controller:
        task = controller.query_changed(query)
        if task is not None:
            await task

        state = controller.state()
        if state.search_error.is_error:
            print(f"⛔ {state.search_error.display_message}")
        else:
            print(f"Found {len(state.search_results)} results")
            for movie in state.search_results:
                print(f"  {movie.id}  {movie.title} ({movie.year or '?'})")

        summary = state.summary
        print(
            f"Watched: {summary.count} movies, "
            f"avg rating {summary.avg_catalog_rating:.2f}, "
            f"avg user rating {summary.avg_user_rating:.2f}, "
            f"avg runtime {summary.avg_runtime:.0f} min"
        )


def main():
    if len(sys.argv) < 2:
        print("usage: python main.py <title>")
        sys.exit(2)

    settings = get_settings()
    logging.basicConfig(level=logging.DEBUG if settings.debug else logging.INFO)
    asyncio.run(run(" ".join(sys.argv[1:])))


if __name__ == "__main__":
    main()
