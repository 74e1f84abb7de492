from typing import Literal, Optional

import numpy as np
import pyopencl as cl
import structlog

from key_tickler.backends.base import DecryptBackend
from key_tickler.errors import BackendError

log = structlog.get_logger(__name__)

type DeviceType = Literal["gpu", "cpu", "any"]

# One work item per ciphertext position. Each builds a private schedule table.
KERNEL_SOURCE = """
__kernel void rc4_decrypt(__global const uchar *ciphertext,
                          __global uchar *plaintext,
                          __global const uchar *key,
                          const int key_length,
                          const int data_length) {
    int p = get_global_id(0);
    if (p >= data_length) {
        return;
    }

    uchar S[256];
    int i = 0, j = 0;
    for (int k = 0; k < 256; k++) {
        S[k] = k;
    }
    for (int k = 0; k < 256; k++) {
        j = (j + S[k] + key[k % key_length]) % 256;
        uchar t = S[k];
        S[k] = S[j];
        S[j] = t;
    }

    i = j = 0;
    for (int n = 0; n < p; n++) {
        i = (i + 1) % 256;
        j = (j + S[i]) % 256;
        uchar t = S[i];
        S[i] = S[j];
        S[j] = t;
    }
    plaintext[p] = ciphertext[p] ^ S[(S[i] + S[j]) % 256];
}
"""

DEVICE_TYPES = {
    "gpu": cl.device_type.GPU,
    "cpu": cl.device_type.CPU,
    "any": cl.device_type.ALL,
}


def pick_devices(device_type: DeviceType = "gpu") -> list:
    """Return the devices of the first platform offering the requested type, GPU falling back to CPU."""
    try:
        platforms = cl.get_platforms()
    except cl.Error as e:
        raise BackendError(f"No OpenCL platforms available: {e}") from e

    wanted = [device_type] if device_type != "gpu" else ["gpu", "cpu"]
    for kind in wanted:
        for platform in platforms:
            try:
                devices = platform.get_devices(device_type=DEVICE_TYPES[kind])
            except cl.Error:
                # Platforms raise DEVICE_NOT_FOUND instead of returning [].
                continue
            if devices:
                if kind != device_type:
                    log.warning("no OpenCL GPU found, using CPU device", device=devices[0].name)
                return devices
    raise BackendError(f"No OpenCL devices of type {device_type!r} found")


class OpenCLBackend(DecryptBackend):
    """Runs the per-position kernel on an OpenCL device."""

    name = "opencl"

    def __init__(self, device_type: DeviceType = "gpu") -> None:
        devices = pick_devices(device_type)
        self.device = devices[0]
        try:
            self.context = cl.Context([self.device])
            self.queue = cl.CommandQueue(self.context)
        except cl.Error as e:
            raise BackendError(f"OpenCL initialization failed: {e}") from e
        try:
            self.program = cl.Program(self.context, KERNEL_SOURCE).build()
            self.kernel = cl.Kernel(self.program, "rc4_decrypt")
        except cl.Error as e:
            # Build failures carry the compiler log in the message.
            raise BackendError(f"OpenCL program build failed: {e}") from e

        # The ciphertext stays on the device across trials.
        self._ciphertext: Optional[bytes] = None
        self._ciphertext_buffer = None
        self._plaintext_buffer = None
        log.info("OpenCL backend ready", device=self.device.name)

    def _upload_ciphertext(self, ciphertext: bytes) -> None:
        if ciphertext is self._ciphertext or ciphertext == self._ciphertext:
            return
        mf = cl.mem_flags
        host = np.frombuffer(ciphertext, dtype=np.uint8)
        self._release_buffers()
        self._ciphertext_buffer = cl.Buffer(self.context, mf.READ_ONLY | mf.COPY_HOST_PTR, hostbuf=host)
        self._plaintext_buffer = cl.Buffer(self.context, mf.WRITE_ONLY, host.nbytes)
        self._ciphertext = ciphertext

    def decrypt(self, ciphertext: bytes, key: bytes) -> bytes:
        if not ciphertext:
            return b""

        mf = cl.mem_flags
        plaintext = np.empty(len(ciphertext), dtype=np.uint8)
        try:
            self._upload_ciphertext(ciphertext)
            key_host = np.frombuffer(key, dtype=np.uint8)
            key_buffer = cl.Buffer(self.context, mf.READ_ONLY | mf.COPY_HOST_PTR, hostbuf=key_host)
            try:
                self.kernel.set_args(
                    self._ciphertext_buffer,
                    self._plaintext_buffer,
                    key_buffer,
                    np.int32(len(key)),
                    np.int32(len(ciphertext)),
                )
                cl.enqueue_nd_range_kernel(self.queue, self.kernel, (len(ciphertext),), None)
                cl.enqueue_copy(self.queue, plaintext, self._plaintext_buffer)
                self.queue.finish()
            finally:
                key_buffer.release()
        except cl.Error as e:
            raise BackendError(f"OpenCL dispatch failed: {e}") from e
        return plaintext.tobytes()

    def _release_buffers(self) -> None:
        for buffer in (self._ciphertext_buffer, self._plaintext_buffer):
            if buffer is not None:
                buffer.release()
        self._ciphertext_buffer = None
        self._plaintext_buffer = None
        self._ciphertext = None

    def close(self) -> None:
        self._release_buffers()
