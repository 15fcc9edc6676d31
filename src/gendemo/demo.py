# demo.py
# The apigee-go-gen feature walkthrough: export, import, render, render a variant, deploy, mock.
from __future__ import annotations

from typing import List

from .dsl import capture, env, seq, tool
from .model import Step

GEN = "apigee-go-gen"
PETSTORE_SPEC = "./examples/specs/oas3/petstore.yaml"
MCP_PROXY = "mcp-petstore-v1"


def demo_sequence() -> List[Step]:
    return seq(
        tool(
            "API Proxy to YAML",
            GEN, "transform", "apiproxy-to-yaml",
            "--input", "./examples/apiproxies/helloworld/helloworld.zip",
            "--output", "./out/yaml-first/helloworld1/apiproxy.yaml",
            output="./out/yaml-first/helloworld1/apiproxy.yaml",
            description="This section demonstrates how to convert an API Proxy to YAML.",
        ),
        tool(
            "YAML to API Proxy",
            GEN, "transform", "yaml-to-apiproxy",
            "--input", "./examples/yaml-first/petstore/apiproxy.yaml",
            "--output", "./out/apiproxies/petstore.zip",
            output="./out/apiproxies/petstore.zip",
            description="This section demonstrates how to convert a YAML file to an API Proxy.",
        ),
        tool(
            "Render OpenAPI",
            GEN, "render", "apiproxy",
            "--template", "./examples/templates/oas3/apiproxy.yaml",
            "--set-oas", f"spec={PETSTORE_SPEC}",
            # the glob is expanded by apigee-go-gen itself
            "--include", "./examples/templates/oas3/*.tmpl",
            "--output", "./out/apiproxies/petstore.zip",
            output="./out/apiproxies/petstore.zip",
            description="This section demonstrates how to render an OpenAPI specification.",
        ),
        tool(
            "Render MCP",
            GEN, "render", "apiproxy",
            "--template", "./examples/templates/mcp/apiproxy.yaml",
            "--set-oas", f"spec={PETSTORE_SPEC}",
            "--include", "./examples/templates/mcp/*.tmpl",
            "--output", f"./out/proxies/{MCP_PROXY}",
            output=f"./out/proxies/{MCP_PROXY}",
            description="This section demonstrates how to render a Managed Component Platform (MCP) configuration.",
        ),
        tool(
            "Deploy MCP Proxy",
            "apigeecli", "apis", "create", "bundle",
            "-e", env("APIGEE_ENV"),
            "-n", MCP_PROXY,
            "-f", f"./out/proxies/{MCP_PROXY}/apiproxy",
            "--ovr",
            "-o", env("PROJECT_ID"),
            "-t", capture("gcloud", "auth", "print-access-token"),
            description="This section uploads the rendered MCP proxy bundle to Apigee.",
        ),
        tool(
            "Mock",
            GEN, "mock", "oas",
            "--input", PETSTORE_SPEC,
            "--output", "./out/mock-apiproxies/petstore.zip",
            output="./out/mock-apiproxies/petstore.zip",
            description="This section demonstrates how to create a mock API from an OpenAPI specification.",
        ),
    )
