# qrservice

A QR Code generator covering QR Code Model 2 (versions 1 to 40, all four
error correction levels, numeric, alphanumeric, byte and ECI segments),
together with a small HTTP service.

## Generating a QR Code

```python
from qrservice.qrcode import QrCode, Ecc

qr = QrCode.encode_text("HELLO WORLD", Ecc.MEDIUM)
for y in range(qr.size):
    print("".join("##" if qr.get_module(x, y) else "  " for x in range(qr.size)))
```

A `QrCode` exposes `version` (1 to 40), `size` (`version * 4 + 17`),
`error_correction_level` (an `Ecc` member: `LOW`, `MEDIUM`, `QUARTILE`,
`HIGH`) and `mask` (0 to 7). `get_module(x, y)` returns `True` for a dark
module; coordinates outside the grid read as light.

`QrCode.encode_text(text, ecl)` picks numeric, alphanumeric or byte mode
(UTF-8) for the whole text. `QrCode.encode_binary(data, ecl)` encodes raw
bytes. For finer control, build segments with `QrSegment.make_numeric`,
`QrSegment.make_alphanumeric`, `QrSegment.make_bytes` or
`QrSegment.make_eci` from `qrservice.segment` and pass them to
`QrCode.encode_segments(segs, ecl, min_version=1, max_version=40, mask=-1,
boost_ecl=True)`. The smallest fitting version in the range is chosen, and a
mask of `-1` chooses the mask with the lowest penalty score. When the data
fits no version in range, `DataTooLongError` (a `ValueError`) is raised;
other invalid arguments raise `ValueError`.

With `boost_ecl` on, the error correction level of the result may be raised
above the requested one when that costs no extra space.

`qrservice.segment` also provides `BitBuffer` (a list of bits with
`append_bits(val, length)`), the `Mode` enumeration, and the helpers
`QrSegment.is_numeric`, `QrSegment.is_alphanumeric` and
`QrSegment.get_total_bits`.

## Running the service

```
qrservice
qrservice --port 9000
```

This prints `Starting HTTP server...` and starts a threaded HTTP server on
port 8080 (or the one given with `--port`), listening on all interfaces,
until interrupted. `GET /hello` answers with `Hello, World!` as plain text;
any other path answers 404.

From Python, `qrservice.service.HttpServer(host="0.0.0.0")` offers
`start(port)`, which blocks while serving, and `stop()`, which may be called
from another thread. `wait_until_ready(timeout)` blocks until the server is
listening, and `server_address` gives the bound `(host, port)` or `None`.

## What it does not do

The HTTP service does not generate QR Codes: it has no endpoint that encodes
data, only `/hello`. The package also does not render QR Codes to image
formats such as PNG or SVG; it gives the grid of modules through
`get_module`, and drawing it is left to the caller.

## Tests

```
pip install -e .[test]
pytest
```