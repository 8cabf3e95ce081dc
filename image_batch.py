import asyncio
import logging

logger = logging.getLogger(__name__)


def _noop(percent):
    pass


async def _generate_one(generate, goal_prompt, size):
    try:
        image = await generate(goal_prompt.prompt, size)
        return image.data_url
    except Exception:
        logger.exception("Failed to generate image for goal %s", goal_prompt.goal_id)
        return None


async def generate_images_sequential(goal_prompts, generate, size="desktop", on_progress=_noop):
    """One request at a time to stay under upstream rate limits.

    Returns ``{goal_id: data_url or None}`` with an entry for every prompt.
    """
    results = {}
    total = len(goal_prompts)
    for completed, goal_prompt in enumerate(goal_prompts, 1):
        results[str(goal_prompt.goal_id)] = await _generate_one(generate, goal_prompt, size)
        on_progress(completed / total * 100)
    return results


async def generate_images_parallel(goal_prompts, generate, size="desktop", on_progress=_noop):
    """All requests at once; progress is reported as each one finishes."""
    total = len(goal_prompts)
    completed = 0

    async def run(goal_prompt):
        nonlocal completed
        url = await _generate_one(generate, goal_prompt, size)
        completed += 1
        on_progress(completed / total * 100)
        return str(goal_prompt.goal_id), url

    pairs = await asyncio.gather(*(run(gp) for gp in goal_prompts))
    return dict(pairs)
