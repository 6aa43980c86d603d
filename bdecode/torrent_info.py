import hashlib
import logging

import requests

from .bencode import Decoder, decode_all
from .errors import TrackerError, TrailingData

PEER_ID = "Hj5kP9xZ2qLmNb7vYc3w"
DEFAULT_PORT = 6881

logger = logging.getLogger(__name__)


class TorrentFile:
    """Read-only view over a decoded `.torrent` metainfo dictionary."""

    def __init__(self, metainfo: dict, raw_info: bytes):
        self.metainfo = metainfo
        self.raw_info = raw_info

    def __str__(self):
        str = f"Name: {self.name}\n"
        str += f"Tracker URL: {self.url}\n"
        str += f"Length: {self.length}\n"
        str += f"Info Hash: {self.info_hash[1]}\n"
        str += f"Piece Length: {self.piece_length}\n"
        str += "\n".join([x.hex() for x in self.pieces])
        return str

    @property
    def info(self) -> dict:
        return self.metainfo[b"info"]

    @property
    def info_hash(self) -> tuple[bytes, str]:
        # Hash the bytes as they were in the file, not a re-encoding.
        sha1_hash = hashlib.sha1(self.raw_info)
        return (sha1_hash.digest(), sha1_hash.hexdigest())

    @property
    def url(self) -> str:
        return self.metainfo[b"announce"].decode()

    @property
    def name(self) -> str:
        return self.info[b"name"].decode()

    @property
    def files(self) -> list[tuple[str, int]]:
        if b"files" not in self.info:
            return [(self.name, self.info[b"length"])]

        return [
            ("/".join(p.decode() for p in f[b"path"]), f[b"length"])
            for f in self.info[b"files"]
        ]

    @property
    def length(self) -> int:
        return sum(length for _, length in self.files)

    @property
    def pieces(self) -> list[bytes]:
        all = self.info[b"pieces"]
        pieces = [all[i : i + 20] for i in range(0, len(all), 20)]
        return pieces

    @property
    def piece_length(self) -> int:
        return self.info[b"piece length"]

    def get_peers(self, port: int = DEFAULT_PORT) -> list[tuple[str, int]]:
        req = {
            "info_hash": self.info_hash[0],
            "peer_id": PEER_ID,
            "port": port,
            "uploaded": 0,
            "downloaded": 0,
            "left": self.length,
            "compact": 1,
        }

        logger.info(f"Announcing to {self.url}")
        r = requests.get(self.url, params=req)

        if not r.ok:
            logger.warning(f"Tracker replied with HTTP {r.status_code}")
            raise TrackerError(r.status_code)

        d = decode_all(r.content)
        if not isinstance(d, dict):
            raise TrackerError("Tracker response is not a dictionary")

        if b"failure reason" in d:
            reason = d[b"failure reason"].decode(errors="replace")
            logger.warning(f"Tracker refused announce: {reason}")
            raise TrackerError(reason)

        all_peers = d[b"peers"]

        peer_list = []
        peers = [all_peers[i : i + 6] for i in range(0, len(all_peers), 6)]

        for p in peers:
            ip = ".".join([repr(int(x)) for x in p[:4]])
            port = int.from_bytes(p[4:])

            peer_list.append((ip, port))

        logger.debug(f"Tracker returned {len(peer_list)} peers")
        return peer_list

    @classmethod
    def from_bytes(cls, data: bytes) -> "TorrentFile":
        d = Decoder(data)
        if d.peek() != b"d":
            raise ValueError("Metainfo must be a bencoded dictionary")

        spans = {}
        metainfo = d.read_dict(spans)
        if not d.is_at_end():
            raise TrailingData(
                f"{len(d.remaining)} unexpected bytes after metainfo", d.current
            )

        if not isinstance(metainfo.get(b"info"), dict):
            raise ValueError("Metainfo must have an 'info' dictionary")

        start, end = spans[b"info"]
        return cls(metainfo, d.source[start:end])

    @classmethod
    def from_file(cls, file: str) -> "TorrentFile":
        with open(file, mode="rb") as f:
            data = f.read()

        logger.debug(f"Loaded {len(data)} bytes from {file}")
        return cls.from_bytes(data)
