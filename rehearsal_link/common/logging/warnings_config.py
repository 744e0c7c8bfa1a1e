"""Warning suppression for the audio decoding stack.

Call suppress_audio_warnings() once at CLI start so decoder fallbacks do
not clutter the timeline output.
"""

import warnings


def suppress_audio_warnings(librosa: bool = True, pysoundfile: bool = True) -> None:
    """Suppress noisy warnings from librosa and its decoder backends.

    Args:
        librosa: Suppress librosa FutureWarnings
        pysoundfile: Suppress PySoundFile / audioread fallback warnings
    """
    if librosa:
        warnings.filterwarnings(
            'ignore',
            category=FutureWarning,
            module='librosa',
        )

    if pysoundfile:
        warnings.filterwarnings(
            'ignore',
            category=UserWarning,
            message='PySoundFile failed.*',
        )
        warnings.filterwarnings(
            'ignore',
            message='.*audioread.*',
        )
