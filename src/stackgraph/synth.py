"""A Terraform synthesiser.

Terraform can be written in JSON :)
https://www.terraform.io/docs/configuration/syntax-json.html
"""

import json
import logging
import os
import stat
from os.path import dirname, join
from pathlib import Path
from typing import List

from .graph import Manifest

LOG = logging.getLogger(__name__)

MAIN_FILENAME = "main.tf.json"
DEPLOY_SCRIPT_FILENAME = "deploy.sh"
TF_OUTPUTS_FILENAME = "tf_outputs.json"

DEPLOY_SCRIPT = f"""#!/usr/bin/env bash
set -xe

cd "$(dirname "$0")"
terraform init
terraform apply
terraform output -json > {TF_OUTPUTS_FILENAME}
"""


class TextSynth:
    """Write some text to a file in the output directory"""

    def __init__(self, filename, text, executable=False):
        self.filename = filename
        self.text = text
        self.executable = executable

    def generate(self, path) -> Path:
        """Write self.text to path/self.filename"""
        dest = join(path, self.filename)
        output_dir = dirname(dest)
        if output_dir:
            os.makedirs(output_dir, exist_ok=True)
        with open(dest, "w") as f:
            f.write(self.text)
            if not self.text.endswith("\n"):
                f.write("\n")
        if self.executable:
            mode = os.stat(dest).st_mode
            os.chmod(dest, mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        LOG.info("Wrote %s", dest)
        return Path(dest)

    def __repr__(self):
        return f"<{type(self).__name__} {self.filename}>"


def terraform_json(manifest: Manifest) -> dict:
    """The Terraform configuration for a finalised graph"""
    config = {}
    if manifest.providers:
        config["provider"] = manifest.providers
    config["resource"] = manifest.resources
    if manifest.outputs:
        config["output"] = manifest.outputs
    return config


def synthesise(manifest: Manifest) -> List[TextSynth]:
    return [
        TextSynth(MAIN_FILENAME, json.dumps(terraform_json(manifest), indent=2)),
        TextSynth(DEPLOY_SCRIPT_FILENAME, DEPLOY_SCRIPT, executable=True),
    ]


def gen_iac(manifest: Manifest, path) -> List[Path]:
    """Write the IAC to files in path"""
    return [generator.generate(path) for generator in synthesise(manifest)]
