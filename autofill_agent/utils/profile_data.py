"""Utilities for loading applicant profiles and stored documents."""

import base64
import json
import logging
import mimetypes
import os
from typing import Any, Dict, Optional

import yaml

from autofill_agent.core.exceptions import ProfileLoadError
from autofill_agent.core.models import Profile, StoredDocument
from autofill_agent.tools.constants import DEFAULT_UPLOAD_TYPE

logger = logging.getLogger(__name__)


class FileDocumentStore:
    """Reads documents from disk and returns them as base64 payloads."""

    def __init__(self, base_dir: Optional[str] = None):
        self.base_dir = base_dir
        self.logger = logging.getLogger(__name__)

    def fetch(self, ref: str) -> StoredDocument:
        """
        Load a document.

        Args:
            ref: File path, relative to base_dir when one is set

        Returns:
            StoredDocument with base64 data and a guessed media type
        """
        path = os.path.expanduser(ref)
        if self.base_dir and not os.path.isabs(path):
            path = os.path.join(self.base_dir, path)
        try:
            with open(path, 'rb') as f:
                raw = f.read()
        except OSError as e:
            raise ProfileLoadError(f"Could not read document {path}: {e}") from e

        media_type = mimetypes.guess_type(path)[0] or DEFAULT_UPLOAD_TYPE
        self.logger.info(f"Loaded document {path} ({len(raw)} bytes, {media_type})")
        return StoredDocument(
            data=base64.b64encode(raw).decode('ascii'),
            name=os.path.basename(path),
            media_type=media_type,
        )


class ProfileManager:
    """
    Loads applicant profiles from JSON or YAML files.
    """

    def __init__(self, profile_path: str, document_store: Optional[FileDocumentStore] = None):
        """
        Initialize with path to the profile file.

        Args:
            profile_path: Path to a .json, .yaml or .yml profile
            document_store: Store used to resolve a ``resume_path`` entry
        """
        self.profile_path = os.path.expanduser(profile_path)
        self.document_store = document_store or FileDocumentStore(os.path.dirname(self.profile_path))

    def load_raw(self) -> Dict[str, Any]:
        """Read the profile file into a dictionary."""
        try:
            with open(self.profile_path, 'r', encoding='utf-8') as f:
                if self.profile_path.lower().endswith(('.yaml', '.yml')):
                    data = yaml.safe_load(f)
                else:
                    data = json.load(f)
        except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
            raise ProfileLoadError(f"Could not load profile {self.profile_path}: {e}") from e

        if not isinstance(data, dict):
            raise ProfileLoadError(f"Profile {self.profile_path} must contain a mapping at the top level")
        return data

    def load(self) -> Profile:
        """
        Load the profile, attaching the resume document when ``resume_path`` is set.

        Returns:
            The parsed Profile
        """
        data = self.load_raw()
        resume_path = data.pop('resume_path', None) or data.pop('resumePath', None)
        profile = Profile.from_dict(data)
        if resume_path and profile.resume is None:
            profile.resume = self.document_store.fetch(resume_path)
        logger.info(f"Loaded profile from {self.profile_path}")
        return profile

    def save(self, profile: Profile) -> bool:
        """
        Save a profile as JSON (stored document payloads excluded).

        Returns:
            True if successful, False otherwise.
        """
        data = profile.to_dict()
        data.pop('resume', None)
        try:
            with open(self.profile_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            logger.error(f"Error saving profile: {e}")
            return False
        logger.info(f"Saved profile to {self.profile_path}")
        return True
