"""Shortcode generators

A generator produces candidate shortcodes for new mappings. Uniqueness is
ultimately enforced by the mapping store (`insert` rejects taken codes), so a
generator only has to make collisions impossible (sequential) or unlikely
(random).

Classes:
    ShortcodeGenerator:
        Abstract generator contract: generate() -> str.

    SequentialShortcodeGenerator:
        Base62-encodes the store's atomic global counter.

    RandomShortcodeGenerator:
        Draws random fixed-length Base62 codes, re-drawing on collision.

Functions:
    build_generator(config, dao) -> ShortcodeGenerator:
        Pick a generator according to `config.code_strategy`.

Example:
    >>> from shortlinks.dao.memory import ShortURLMemoryDAO
    >>> generator = SequentialShortcodeGenerator(ShortURLMemoryDAO(), length=7)
    >>> generator.generate()
    '1'
    >>> generator.generate()
    '2'
"""

import random
import logging
from abc import ABC, abstractmethod

from beartype import beartype

from shortlinks.constants import Defaults, CodeStrategy
from shortlinks.dao.base import ShortURLBaseDAO
from shortlinks.exceptions import CounterOverflowError, GenerationExhaustedError
from shortlinks.utils.config import ShortenerConfig
from shortlinks.utils.shortener import BASE, encode_base62, random_shortcode


logger = logging.getLogger(__name__)


class ShortcodeGenerator(ABC):
    """Interface for shortcode generators.

    Attributes:
        dao (ShortURLBaseDAO):
            Mapping store the generator draws its state (counter or collision checks) from.
        length (int):
            Maximum number of symbols of a generated shortcode.
    """

    @beartype
    def __init__(self, dao: ShortURLBaseDAO, length: int = Defaults.CODE_LENGTH):
        if length <= 0:
            raise ValueError(f'Shortcode length must be a positive integer (given value: {length}).')
        self.dao = dao
        self.length = length

    @abstractmethod
    def generate(self) -> str:
        """Return a fresh candidate shortcode.

        Raises:
            GenerationError:
                If no shortcode can be produced.
            DataStoreError:
                If the mapping store is unavailable.
        """
        pass


class SequentialShortcodeGenerator(ShortcodeGenerator):
    """Generate shortcodes from the store's atomic global counter.

    Every call increments the counter (Redis INCR, or the memory store's
    lock-protected integer) and Base62-encodes the new value. The counter
    lives in the store, so codes never repeat across workers or restarts,
    and they strictly increase with the counter.

    Codes are as short as the counter allows: counter 1 gives '1',
    counter 62 gives '10'. Once the counter needs more than `length`
    symbols the generator raises CounterOverflowError.
    """

    @property
    def capacity(self) -> int:
        """Number of distinct counter values that fit into `length` symbols."""
        return BASE**self.length

    def generate(self) -> str:
        counter = self.dao.count(increment=True)
        if counter >= self.capacity:
            logger.error(
                'Shortcode counter overflowed the configured code length.',
                extra={'counter': counter, 'length': self.length},
            )
            raise CounterOverflowError(
                f'Counter value {counter} does not fit into {self.length} Base62 symbols (capacity: {self.capacity}).'
            )
        return encode_base62(counter)


class RandomShortcodeGenerator(ShortcodeGenerator):
    """Generate random fixed-length shortcodes.

    Each candidate is drawn uniformly from the Base62 alphabet and checked
    against the store with `exists()` (which also covers retired codes).
    On collision a new candidate is drawn, at most `max_retries` times in
    total, after which GenerationExhaustedError is raised.

    Args:
        dao (ShortURLBaseDAO):
            Mapping store used for collision checks.
        length (int):
            Number of symbols of every generated shortcode.
        max_retries (int):
            Upper bound on candidates drawn per generate() call.
        rng (random.Random | None):
            Random source. Defaults to secrets.SystemRandom.
    """

    @beartype
    def __init__(
        self,
        dao: ShortURLBaseDAO,
        length: int = Defaults.CODE_LENGTH,
        max_retries: int = Defaults.MAX_RANDOM_RETRIES,
        rng: random.Random | None = None,
    ):
        super().__init__(dao, length)
        if max_retries < 1:
            raise ValueError(f'Retry bound must be at least 1 (given value: {max_retries}).')
        self.max_retries = max_retries
        self.rng = rng

    def generate(self) -> str:
        for attempt in range(1, self.max_retries + 1):
            shortcode = random_shortcode(self.length, rng=self.rng)
            if not self.dao.exists(shortcode):
                return shortcode
            logger.debug('Random shortcode collided, drawing again.', extra={'shortcode': shortcode, 'attempt': attempt})

        logger.warning('Random shortcode generation exhausted its retries.', extra={'maxRetries': self.max_retries})
        raise GenerationExhaustedError(f'Could not draw a free shortcode in {self.max_retries} attempts.')


def build_generator(config: ShortenerConfig, dao: ShortURLBaseDAO) -> ShortcodeGenerator:
    if config.code_strategy is CodeStrategy.RANDOM:
        return RandomShortcodeGenerator(dao, length=config.code_length, max_retries=config.max_random_retries)
    return SequentialShortcodeGenerator(dao, length=config.code_length)
