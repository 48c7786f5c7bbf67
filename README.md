# sstvrx

A slow-scan television (SSTV) receiver in plain Python. It takes baseband
I/Q samples, FM-demodulates them to instantaneous frequency, finds the VIS
header, the line sync tones and the even/odd parity pulses, turns the scan
lines into Y, R-Y and B-Y values and writes the picture as a 320×240,
24-bit BMP file.

No third-party libraries are needed at run time.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Command line

```
sstvrx INPUT [-o OUTPUT] [-d N] [-r HZ]
```

- `INPUT` is a file of interleaved big-endian signed 16-bit I/Q pairs.
- `-o`, `--output` is the BMP file to write (default `sstv_image.bmp`).
- `-d`, `--decimation` keeps every N-th I/Q pair before demodulating
  (default 1, i.e. no decimation).
- `-r`, `--sample-rate` is the I/Q sample rate after decimation in Hz
  (default 48000).

The command decodes one image and saves it. It exits with 0 on success,
1 if the recording ends before an image is complete (the message names the
decoder state reached), and 2 if the input cannot be read or its size is
not a whole number of I/Q pairs.

## Library use

### Signal processing

`sstvrx.dsp` holds the fixed-point building blocks and the timing constants:

```python
from sstvrx.dsp import fm_demodulate, freq_to_yuv, map_to_pixels, yuv_to_rgb

freqs = fm_demodulate(i_samples, q_samples, 48000)  # one value fewer than the samples
levels = freq_to_yuv(freqs)                         # <=1500 Hz -> 0, >=2300 Hz -> 255
pixels = map_to_pixels(levels, 320)                 # average runs of samples per pixel
r, g, b = yuv_to_rgb(128, 128, 128)                 # clamped to 0..255
```

It also provides `fxatan` (phase scaled to the 16-bit range),
`calculate_average`, `is_freq_match` and `get_power`.

### Streaming decoder

`sstvrx.stream.FrequencyStream` serves demodulated frequencies in requested
amounts from any iterable of blocks and raises `EndOfStream` when the blocks
run out. `sstvrx.decoder.Decoder` runs the receiver state machine
(`SstvState`) over such a stream:

```python
from sstvrx.stream import FrequencyStream
from sstvrx.decoder import Decoder

stream = FrequencyStream(frequency_blocks)
image = Decoder(stream).decode()   # raises EndOfStream if the data ends early
image.save("sstv_image.bmp")
pixel_bytes = image.to_rgb()       # top-to-bottom rows, BGR byte order
```

`Image` keeps the luminance rows (`y_lines`) and the colour-difference rows
shared by each line pair (`ry_lines`, `by_lines`).

The tone state machines used by the decoder are in `sstvrx.sync`:
`vis_sync_search`, `line_sync_search` and `parity_sync_search` (which
returns `Parity.EVEN` or `Parity.ODD`).

### Offline detectors

For whole recordings held in memory there are windowed detectors that
report absolute sample positions:

```python
from sstvrx.detect_vis import detect_vis_sync, detect_vis_sync_seconds
from sstvrx.detect_line import detect_line_sync
from sstvrx.detect_parity import detect_line_parity

vis = detect_vis_sync(samples_i, samples_q, search_start=0, search_length=96000)
if vis.found:
    print(vis.start_position, vis.sync_position, vis.end_position, vis.duration_ms)

parity = detect_line_parity(samples_i, samples_q, 0, 4800)
if parity.found:
    print("odd" if parity.is_odd else "even", parity.sync_position)
```

`detect_vis_sync` and `detect_line_sync` return a `SyncResult`;
`detect_line_parity` returns a `ParityResult`. Progress is reported through
the `logging` module.

### BMP output

`sstvrx.bmp.encode_bmp` turns top-to-bottom BGR pixel data into the bytes of
a bottom-up 24-bit BMP file; `sstvrx.bmp.save_bmp` writes them to a path.

### Shell helpers

`sstvrx.shell` provides `LineEditor`, a small line editor with backspace,
ESC cancel and TAB recall of the previous line, and the number helpers
`parse_number` (decimal, `0x` or `h` hexadecimal), `format_unsigned` and
`linear_to_db`.

## What it does not do

- It does not capture from radio hardware or tune a receiver; it only
  works on I/Q samples given to it, from a file or from Python.
- It does not read the mode code carried in the VIS header. Every image is
  decoded with one fixed line timing into a 320×240 picture.
- The command decodes a single image per run and saves only BMP files.