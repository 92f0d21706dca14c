from typing import List, Sequence, Union

import numpy as np

from pwmkit.models import NtSeq, encode_text


class RaggedData:
    """
    Class for storing many integer-encoded sequences of different lengths.

    Sequences are concatenated into one flat ``data`` array and delimited by
    ``offsets`` (``num_sequences + 1`` entries), which is the layout the
    numba scanning kernels iterate over.
    """

    def __init__(self, data: np.ndarray, offsets: np.ndarray):
        """Initialize the RaggedData object."""
        self.data = data
        self.offsets = offsets

    @property
    def num_sequences(self) -> int:
        """Return the number of sequences."""
        return self.offsets.size - 1


def ragged_from_list(data_list: List[np.ndarray], dtype=np.int8) -> RaggedData:
    """Create RaggedData from a list of numpy arrays."""
    n = len(data_list)
    offsets = np.zeros(n + 1, dtype=np.int64)
    for i, arr in enumerate(data_list):
        offsets[i + 1] = offsets[i] + len(arr)

    data = np.empty(offsets[-1], dtype=dtype)
    for i, arr in enumerate(data_list):
        data[offsets[i] : offsets[i + 1]] = arr

    return RaggedData(data, offsets)


def encode_sequences(sequences: Sequence[Union[str, NtSeq]]) -> RaggedData:
    """Integer-encode text sequences into a RaggedData batch."""
    return ragged_from_list([encode_text(str(seq)) for seq in sequences], dtype=np.int8)
