"""
Proving and Verification Backends
=================================

Adapters to the external systems that compute and check real eligibility
proofs.

- SnarkjsProvingBackend: runs `snarkjs groth16 fullprove` via subprocess
  against locally compiled circuit artifacts
- RemoteProvingBackend: posts circuit inputs to a proof-provider service
- SnarkjsVerificationBackend: runs `snarkjs groth16 verify` against the
  circuit verification key

Backends raise ProvingBackendUnavailable (or anything else) on failure; the
proof orchestrator turns every failure into the fallback path.

Version: 0.1.0
"""

import asyncio
import json
import subprocess
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import httpx

from ghosthire.config import ProvingBackendKind, settings
from ghosthire.logging import get_logger
from ghosthire.zk.exceptions import ProvingBackendUnavailable, VerificationBackendUnavailable
from ghosthire.zk.models import Groth16Proof


logger = get_logger(__name__)


class ProvingBackend(ABC):
    """Strategy interface for real proof computation."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Short backend name, recorded on real artifacts."""
        ...

    @abstractmethod
    def artifacts_available(self) -> bool:
        """Whether the circuit and proving key (or prover endpoint) exist."""
        ...

    @abstractmethod
    async def prove(self, circuit_inputs: dict[str, Any]) -> tuple[dict[str, Any], list[str]]:
        """
        Compute a proof.

        Args:
            circuit_inputs: Private and public circuit inputs

        Returns:
            Tuple of (proof_json, public_signals)
        """
        ...


class SnarkjsProvingBackend(ProvingBackend):
    """
    Local Groth16 proving with snarkjs.

    Expects `<build_dir>/<circuit>/<circuit>_js/<circuit>.wasm` and
    `<build_dir>/<circuit>/proving_key.zkey`.
    """

    def __init__(
        self,
        build_dir: str | Path | None = None,
        circuit_name: str | None = None,
        timeout: float | None = None,
    ):
        self.build_dir = Path(build_dir) if build_dir else settings.proving.build_dir
        self.circuit_name = circuit_name or settings.proving.circuit_name
        self.timeout = timeout if timeout is not None else settings.proving.timeout_seconds

    @property
    def name(self) -> str:
        return "snarkjs"

    @property
    def circuit_dir(self) -> Path:
        return self.build_dir / self.circuit_name

    @property
    def wasm_path(self) -> Path:
        return self.circuit_dir / f"{self.circuit_name}_js" / f"{self.circuit_name}.wasm"

    @property
    def zkey_path(self) -> Path:
        return self.circuit_dir / "proving_key.zkey"

    def artifacts_available(self) -> bool:
        available = self.wasm_path.exists() and self.zkey_path.exists()
        if not available:
            logger.debug(
                "zk_circuit_artifacts_missing",
                wasm=str(self.wasm_path),
                zkey=str(self.zkey_path),
            )
        return available

    async def prove(self, circuit_inputs: dict[str, Any]) -> tuple[dict[str, Any], list[str]]:
        if not self.wasm_path.exists():
            raise ProvingBackendUnavailable(f"Circuit WASM not found: {self.wasm_path}")
        if not self.zkey_path.exists():
            raise ProvingBackendUnavailable(f"Proving key not found: {self.zkey_path}")

        # Per-call scratch directory so concurrent proofs never share files
        with tempfile.TemporaryDirectory(prefix="ghosthire-proof-") as scratch:
            scratch_dir = Path(scratch)
            input_file = scratch_dir / "input.json"
            proof_file = scratch_dir / "proof.json"
            public_file = scratch_dir / "public.json"

            with open(input_file, "w") as f:
                json.dump(circuit_inputs, f)

            try:
                result = await asyncio.to_thread(
                    subprocess.run,
                    [
                        "npx",
                        "snarkjs",
                        "groth16",
                        "fullprove",
                        str(input_file),
                        str(self.wasm_path),
                        str(self.zkey_path),
                        str(proof_file),
                        str(public_file),
                    ],
                    capture_output=True,
                    text=True,
                    timeout=self.timeout,
                )
            except (OSError, subprocess.TimeoutExpired) as e:
                raise ProvingBackendUnavailable(f"snarkjs could not run: {e}") from e

            if result.returncode != 0:
                logger.error(
                    "snarkjs_proof_generation_failed",
                    stderr=result.stderr,
                    circuit=self.circuit_name,
                )
                raise ProvingBackendUnavailable(f"Proof generation failed: {result.stderr}")

            with open(proof_file) as f:
                proof_json = json.load(f)
            with open(public_file) as f:
                public_signals = json.load(f)

        return proof_json, public_signals


class RemoteProvingBackend(ProvingBackend):
    """Proof-provider service reached over HTTP."""

    def __init__(
        self,
        url: str | None = None,
        circuit_name: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.url = (url if url is not None else settings.proving.prover_url).rstrip("/")
        self.circuit_name = circuit_name or settings.proving.circuit_name
        self.timeout = timeout if timeout is not None else settings.proving.timeout_seconds
        self._client = client

    @property
    def name(self) -> str:
        return "remote"

    def artifacts_available(self) -> bool:
        return bool(self.url)

    async def prove(self, circuit_inputs: dict[str, Any]) -> tuple[dict[str, Any], list[str]]:
        payload = {"circuit": self.circuit_name, "inputs": circuit_inputs}

        try:
            if self._client is not None:
                response = await self._client.post(f"{self.url}/prove", json=payload)
            else:
                async with httpx.AsyncClient(timeout=httpx.Timeout(self.timeout)) as client:
                    response = await client.post(f"{self.url}/prove", json=payload)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise ProvingBackendUnavailable(f"Proof provider request failed: {e}") from e

        if not isinstance(data, dict) or "proof" not in data or "publicSignals" not in data:
            raise ProvingBackendUnavailable("Proof provider returned an unexpected body")

        return data["proof"], data["publicSignals"]


class VerificationBackend(ABC):
    """Strategy interface for local cryptographic proof checks."""

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    def artifacts_available(self) -> bool:
        """Whether the verification key exists."""
        ...

    @abstractmethod
    async def verify(self, proof: Groth16Proof, public_signals: list[str]) -> bool:
        """
        Check a proof against the circuit verification key.

        Returns:
            True if the pairing check passes, False if it fails

        Raises:
            VerificationBackendUnavailable: If no verdict could be obtained
        """
        ...


class SnarkjsVerificationBackend(VerificationBackend):
    """
    Local Groth16 verification with snarkjs.

    Expects `<build_dir>/<circuit>/verification_key.json`.
    """

    def __init__(
        self,
        build_dir: str | Path | None = None,
        circuit_name: str | None = None,
        timeout: float | None = None,
    ):
        self.build_dir = Path(build_dir) if build_dir else settings.proving.build_dir
        self.circuit_name = circuit_name or settings.proving.circuit_name
        self.timeout = timeout if timeout is not None else settings.proving.timeout_seconds

    @property
    def name(self) -> str:
        return "snarkjs"

    @property
    def vkey_path(self) -> Path:
        return self.build_dir / self.circuit_name / "verification_key.json"

    def artifacts_available(self) -> bool:
        return self.vkey_path.exists()

    async def verify(self, proof: Groth16Proof, public_signals: list[str]) -> bool:
        if not self.vkey_path.exists():
            raise VerificationBackendUnavailable(f"Verification key not found: {self.vkey_path}")

        with tempfile.TemporaryDirectory(prefix="ghosthire-verify-") as scratch:
            scratch_dir = Path(scratch)
            proof_file = scratch_dir / "proof.json"
            public_file = scratch_dir / "public.json"

            with open(proof_file, "w") as f:
                json.dump(proof.model_dump(mode="json"), f)
            with open(public_file, "w") as f:
                json.dump(public_signals, f)

            try:
                result = await asyncio.to_thread(
                    subprocess.run,
                    [
                        "npx",
                        "snarkjs",
                        "groth16",
                        "verify",
                        str(self.vkey_path),
                        str(public_file),
                        str(proof_file),
                    ],
                    capture_output=True,
                    text=True,
                    timeout=self.timeout,
                )
            except (OSError, subprocess.TimeoutExpired) as e:
                raise VerificationBackendUnavailable(f"snarkjs could not run: {e}") from e

        if result.returncode == 0 and "OK" in result.stdout:
            return True

        output = f"{result.stdout}\n{result.stderr}"
        if "Invalid proof" in output:
            return False

        logger.error(
            "snarkjs_verification_failed",
            returncode=result.returncode,
            stderr=result.stderr,
            circuit=self.circuit_name,
        )
        raise VerificationBackendUnavailable(f"snarkjs verify failed: {result.stderr}")


def get_proving_backend() -> ProvingBackend | None:
    """
    Build the proving backend selected by ZK_BACKEND.

    Returns:
        ProvingBackend instance, or None when real proving is switched off
    """
    kind = settings.proving.backend

    if kind == ProvingBackendKind.NONE:
        return None
    if kind == ProvingBackendKind.SNARKJS:
        return SnarkjsProvingBackend()
    if kind == ProvingBackendKind.REMOTE:
        return RemoteProvingBackend()
    raise ValueError(f"Unknown proving backend: {kind}")


def get_verification_backend() -> VerificationBackend | None:
    """
    Build the local verifier, unless VERIFICATION_LOCAL_CHECK is off.

    The verifier is only consulted when its verification key exists.
    """
    if not settings.verification.local_check:
        return None
    return SnarkjsVerificationBackend()
