# trafficreplay

Building blocks for tools that record live HTTP traffic and replay it
against other environments: byte-level payload editing, parsing of the
traffic modifier's options, rate limiting of plugins, BPF filter
construction, pcap file writing, raw-input settings and small running
statistics.

The package has no runtime dependencies beyond the standard library.

## Editing payloads

`trafficreplay.byteutils` works on `bytes` and returns new values. Each
function raises `IndexError` when the range lies outside the data.

```python
from trafficreplay.byteutils import cut, insert, replace

cut(b"123456", 2, 4)              # b"1256"
insert(b"123456", 2, b"abcd")     # b"12abcd3456"
replace(b"123456", 2, 4, b"abcd") # b"12abcd56"
```

## Modifier options

`trafficreplay.modifier_settings` parses the values of the traffic
modifier options. Each `parse_*` function takes the option value as
given on the command line and raises `ModifierOptionError` (a
`ValueError`) when it is malformed:

| function                  | value form                       | result            |
|---------------------------|----------------------------------|-------------------|
| `parse_header_filter`     | `Name:regexp`                    | `HeaderFilter`    |
| `parse_basic_auth_filter` | `regexp`                         | `BasicAuthFilter` |
| `parse_hash_filter`       | `Name:NN%` (or `Name:num/den`)   | `HashFilter`      |
| `parse_header`            | `Key: Value`                     | `HeaderValue`     |
| `parse_param`             | `Key=Value`                      | `ParamValue`      |
| `parse_method`            | `GET`                            | `bytes`           |
| `parse_url_rewrite`       | `src_regexp:target`              | `UrlRewrite`      |
| `parse_header_rewrite`    | `Header: regexp,target`          | `HeaderRewrite`   |
| `parse_url_regexp`        | `regexp`                         | `UrlRegexp`       |

Regexps are compiled for matching against `bytes`. `UrlRewrite.apply`
and `HeaderRewrite.apply` return the rewritten value, or `None` when the
rule does not match; the target may refer to groups as `$1`, `${1}`,
`$name` or `${name}`, and `$$` stands for a literal dollar sign.

```python
from trafficreplay.modifier_settings import (
    ModifierConfig,
    parse_hash_filter,
    parse_url_rewrite,
)

parse_hash_filter("User-Id:1/2").percent   # 50
rewrite = parse_url_rewrite("/v1/user/([^\\/]+)/ping:/v2/user/$1/ping")
rewrite.apply(b"/v1/user/42/ping")         # b"/v2/user/42/ping"

config = ModifierConfig()
config.is_empty()                          # True
config.add("http-allow-method", "GET")
config.add("http-set-header", "X-Replayed: 1")
config.is_empty()                          # False
```

`ModifierConfig.add(option, value)` parses a value for the named option
(`http-allow-url`, `http-disallow-url`, `http-rewrite-url`,
`http-rewrite-header`, `http-allow-header`, `http-disallow-header`,
`http-basic-auth-filter`, `http-header-limiter`, `http-param-limiter`,
`http-set-param`, `http-set-header`, `http-allow-method`) and appends it
to the matching list; an unknown option raises `ModifierOptionError`.

## Rate limiting

`trafficreplay.limiter.Limiter` wraps any object with `plugin_read`
and/or `plugin_write` methods and drops messages above a limit. The
limit is either absolute, in messages per second (`"10"`), or a
percentage (`"10%"`) applied at random. A wrapped plugin that has a
`speed_factor` attribute is given `limit / 100` as its speed factor when
a percentage is used, and no messages are dropped.

```python
from trafficreplay.limiter import Limiter, parse_limit_options

parse_limit_options("10%")    # (10, True)
parse_limit_options("100")    # (100, False)

limited = Limiter(output_plugin, "100")
limited.plugin_write(message) # 0 when the message was dropped
```

`plugin_read` returns `None` for a dropped message. Calling a method the
wrapped plugin lacks raises `BrokenPipeError`; `close` closes the wrapped
plugin if it can be closed.

## Statistics

`trafficreplay.gor_stat.GorStat(name, rate_ms, enabled)` keeps the
latest value, the running mean, the maximum and the count of the values
passed to `write`. Values are only recorded when `enabled` is true; in
that case a background thread also logs the header and then a report
line every `rate_ms` milliseconds through the `logging` module,
resetting the statistics after each line. `str()` gives the report line
(`name:latest,mean,max,count,count/second,threads`) and `header()` the
matching column names.

## Capture helpers

`trafficreplay.capture.filters` builds the BPF filter expressions used
when sniffing a host and a set of ports:

```python
from trafficreplay.capture.filters import (
    EngineType,
    InterfaceInfo,
    build_filter,
    hosts_filter,
    ports_filter,
)

ports_filter("tcp", "dst", [80, 8080])  # "tcp dst port 80 or tcp dst port 8080"
hosts_filter("dst", ["127.0.0.1"])      # "dst host 127.0.0.1"
str(EngineType.parse("pcap_file"))      # "pcap_file"

build_filter("127.0.0.1", [80], track_response=True)
# "((tcp dst port 80) and (dst host 127.0.0.1)) or ((tcp src port 80) and (src host 127.0.0.1))"
```

`build_filter(host, ports, transport, track_response, iface)` takes an
`InterfaceInfo` (a name and its addresses); when the host means every
address, or names that interface, the interface's own addresses are
used. The module also has `listen_all`, `is_device`,
`interface_addresses`, `link_type_length` (link-layer header size for a
pcap link type, or `None` when unknown) and `afpacket_compute_size`
(frame size, block size and block count of an AF_PACKET ring, raising
`ValueError` when the target size is too small).

`trafficreplay.capture.pcap_writer.PcapWriter` writes classic pcap
files (v2.4, little-endian) with microsecond or nanosecond timestamps.
A `CaptureInfo` with no `timestamp_ns` is stamped with the current time;
`write_packet` raises `ValueError` when the capture length does not
match the data or exceeds the packet length.

```python
from trafficreplay.capture.pcap_writer import CaptureInfo, PcapWriter

data = b"\x00" * 60
with open("capture.pcap", "wb") as stream:
    writer = PcapWriter(stream, nanos=False)
    writer.write_file_header(65536, 1)
    writer.write_packet(CaptureInfo(capture_length=len(data), length=len(data)), data)
```

## Raw input settings

`trafficreplay.tcp_protocol` holds `TCPProtocol`, parsed from `"http"`
(or an empty string) and `"binary"`, and `parse_address`, which splits
a listening address into its host and list of ports:

```python
from trafficreplay.tcp_protocol import TCPProtocol, parse_address

parse_address("127.0.0.1:80,8080")  # ("127.0.0.1", [80, 8080])
parse_address("[::1]:80")           # ("::1", [80])
str(TCPProtocol.parse("binary"))    # "binary"
```

Malformed addresses and ports raise `ValueError`.

## What the package does not do

This is a library of parts, not a finished tool. It has no command to
run, does not open capture devices or sockets, does not read packets,
and has no input or output plugins, middleware runner or replay loop of
its own: those are left to the program built on top of it. It has no
Kafka support.