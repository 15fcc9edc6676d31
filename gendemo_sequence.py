# gendemo_sequence.py
# A shorter sequence: only the local transforms, no Apigee org needed.
#   gendemo run --sequence gendemo_sequence.py
from __future__ import annotations
from gendemo import seq, tool


def sequence():
    return seq(
        tool(
            "API Proxy to YAML",
            "apigee-go-gen", "transform", "apiproxy-to-yaml",
            "--input", "./examples/apiproxies/helloworld/helloworld.zip",
            "--output", "./out/yaml-first/helloworld1/apiproxy.yaml",
            output="./out/yaml-first/helloworld1/apiproxy.yaml",
        ),
        tool(
            "YAML to API Proxy",
            "apigee-go-gen", "transform", "yaml-to-apiproxy",
            "--input", "./out/yaml-first/helloworld1/apiproxy.yaml",
            "--output", "./out/apiproxies/helloworld.zip",
            output="./out/apiproxies/helloworld.zip",
        ),
    )
