"""
Dataset utilities for VP-tree experiments.

Provides unified interface for loading:
- Synthetic uniform and clustered vectors (as tuples of floats)
- Random words over an alphabet, with perturbed words as queries
- Plain-text word lists (one item per line)
"""

import numpy as np
from typing import Any, List, Optional, Tuple
from pathlib import Path


def read_word_list(filename: str, lowercase: bool = False) -> List[str]:
    """Read one item per line, skipping blank lines and duplicates."""
    seen = set()
    words = []
    with open(filename, 'r', encoding='utf-8') as f:
        for line in f:
            word = line.strip()
            if lowercase:
                word = word.lower()
            if word and word not in seen:
                seen.add(word)
                words.append(word)
    return words


def _as_tuples(X: np.ndarray) -> List[Tuple[float, ...]]:
    """Rows as hashable tuples so results can be compared as sets."""
    return [tuple(float(v) for v in row) for row in X]


class DataLoader:
    """
    Unified data loader for all experiment datasets.

    Parameters
    ----------
    data_dir : str, default='./data'
        Directory relative word list paths are resolved against.
    random_state : int, default=42
        Random seed for reproducibility.
    """

    def __init__(self, data_dir: str = './data', random_state: int = 42):
        self.data_dir = Path(data_dir)
        self.random_state = random_state
        self.rng = np.random.default_rng(random_state)

    def load(
        self,
        dataset_name: str,
        **kwargs
    ) -> Tuple[List[Any], List[Any]]:
        """
        Load a dataset.

        Parameters
        ----------
        dataset_name : str
            Name of dataset: 'synthetic_uniform', 'synthetic_clustered',
            'words', 'word_file'.
        **kwargs : dict
            Dataset-specific parameters.

        Returns
        -------
        items : list
            Items to index.
        queries : list
            Query targets (not necessarily members of ``items``).
        """
        loaders = {
            'synthetic_uniform': self._load_synthetic_uniform,
            'synthetic_clustered': self._load_synthetic_clustered,
            'words': self._load_random_words,
            'word_file': self._load_word_file,
        }

        if dataset_name not in loaders:
            raise ValueError(f"Unknown dataset: {dataset_name}. "
                             f"Available: {list(loaders.keys())}")

        return loaders[dataset_name](**kwargs)

    def _load_synthetic_uniform(
        self,
        n: int = 10000,
        d: int = 8,
        n_queries: int = 100
    ) -> Tuple[List[Tuple[float, ...]], List[Tuple[float, ...]]]:
        """Points drawn uniformly from the unit hypercube."""
        X = self.rng.random((n, d))
        Q = self.rng.random((n_queries, d))
        return _as_tuples(X), _as_tuples(Q)

    def _load_synthetic_clustered(
        self,
        n: int = 10000,
        d: int = 8,
        n_clusters: int = 10,
        cluster_std: float = 0.05,
        n_queries: int = 100
    ) -> Tuple[List[Tuple[float, ...]], List[Tuple[float, ...]]]:
        """
        Gaussian blobs around uniformly placed centers.

        Queries are drawn from the same mixture, which is the easy case for
        metric trees: most of the far clusters get pruned.
        """
        centers = self.rng.random((n_clusters, d))

        labels = self.rng.integers(n_clusters, size=n)
        X = centers[labels] + self.rng.normal(scale=cluster_std, size=(n, d))

        q_labels = self.rng.integers(n_clusters, size=n_queries)
        Q = centers[q_labels] + self.rng.normal(scale=cluster_std, size=(n_queries, d))

        return _as_tuples(X), _as_tuples(Q)

    def _load_random_words(
        self,
        n: int = 5000,
        n_queries: int = 100,
        min_length: int = 4,
        max_length: int = 10,
        alphabet: str = 'abcdefghijklmnopqrstuvwxyz',
        n_edits: int = 2
    ) -> Tuple[List[str], List[str]]:
        """
        Random words, with queries made by applying edits to stored words.
        """
        words = [
            self._random_word(alphabet, min_length, max_length)
            for _ in range(n)
        ]
        queries = [
            self._perturb(words[int(self.rng.integers(n))], alphabet, n_edits)
            for _ in range(n_queries)
        ]
        return words, queries

    def _load_word_file(
        self,
        path: str,
        n_queries: int = 100,
        n_edits: int = 1,
        lowercase: bool = True,
        limit: Optional[int] = None
    ) -> Tuple[List[str], List[str]]:
        """
        Word list from disk, e.g. /usr/share/dict/words.

        Relative paths are resolved against ``data_dir``.
        """
        file_path = Path(path)
        if not file_path.is_absolute():
            file_path = self.data_dir / file_path
        if not file_path.exists():
            raise FileNotFoundError(f"Word list not found at {file_path}")

        words = read_word_list(str(file_path), lowercase=lowercase)
        if limit is not None:
            words = words[:limit]
        if not words:
            raise ValueError(f"Word list {file_path} is empty")

        alphabet = ''.join(sorted({c for w in words for c in w}))
        queries = [
            self._perturb(words[int(self.rng.integers(len(words)))], alphabet, n_edits)
            for _ in range(n_queries)
        ]
        return words, queries

    def _random_word(self, alphabet: str, min_length: int, max_length: int) -> str:
        length = int(self.rng.integers(min_length, max_length + 1))
        return ''.join(alphabet[i] for i in self.rng.integers(len(alphabet), size=length))

    def _perturb(self, word: str, alphabet: str, n_edits: int) -> str:
        """Apply ``n_edits`` random substitutions, insertions or deletions."""
        chars = list(word)
        for _ in range(n_edits):
            op = int(self.rng.integers(3))
            if op == 0 and chars:
                pos = int(self.rng.integers(len(chars)))
                chars[pos] = alphabet[int(self.rng.integers(len(alphabet)))]
            elif op == 1 or not chars:
                pos = int(self.rng.integers(len(chars) + 1))
                chars.insert(pos, alphabet[int(self.rng.integers(len(alphabet)))])
            else:
                pos = int(self.rng.integers(len(chars)))
                del chars[pos]
        return ''.join(chars)
