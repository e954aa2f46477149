import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, List, Sequence, Tuple, TypeVar

from pdfmind.core.errors import ExhaustedFallbackError, StageError, StageSkipped

logger = logging.getLogger(__name__)

T = TypeVar("T")

StageFn = Callable[[Any], Awaitable[T]]


@dataclass
class Stage(Generic[T]):
    name: str
    run: StageFn


async def run_chain(operation: str, stages: Sequence[Stage[T]], request: Any) -> Tuple[str, T]:
    """
    Essaie chaque étape une seule fois, dans l'ordre.
    Retourne (nom de l'étape gagnante, résultat) ou lève ExhaustedFallbackError
    avec toutes les erreurs collectées.

    Seules les StageError déclenchent le fallback : une autre exception est un bug
    et remonte telle quelle.
    """
    errors: List[StageError] = []
    for stage in stages:
        try:
            result = await stage.run(request)
        except StageSkipped as e:
            e.stage = e.stage or stage.name
            logger.debug("%s: stage %s skipped (%s)", operation, stage.name, e)
            errors.append(e)
            continue
        except StageError as e:
            e.stage = e.stage or stage.name
            logger.warning("%s: stage %s failed: %s", operation, stage.name, e)
            errors.append(e)
            continue

        if errors:
            logger.info("%s: served by fallback stage %s", operation, stage.name)
        return stage.name, result

    raise ExhaustedFallbackError(operation, errors)
