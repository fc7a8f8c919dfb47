from __future__ import annotations

import copy
from typing import Any

from domain.models import Plan

EXAMPLE_PLAN: dict[str, Any] = {
    "steps": [
        {
            "split": {
                "id": "is_manager",
                "label": "Is manager?",
                "branches": [
                    {
                        "label": "true",
                        "steps": [
                            {
                                "action": {
                                    "id": "add_to_channel",
                                    "provider": "slack",
                                    "label": "Add to channel",
                                    "tool_name": "SLACK_INVITE_TO_CHANNEL",
                                    "payload": {"channel": "managers"},
                                }
                            }
                        ],
                    },
                    {
                        "label": "false",
                        "steps": [
                            {
                                "action": {
                                    "id": "update_profile",
                                    "provider": "slack",
                                    "label": "Update profile",
                                    "tool_name": "SLACK_UPDATE_PROFILE",
                                    "payload": {"title": "IC"},
                                }
                            }
                        ],
                    },
                ],
            }
        },
        {
            "sequential": [
                {
                    "label": "Create product",
                    "call_type": "Composio",
                    "tool_name": "SHOPIFY_CREATE_PRODUCT",
                    "payload": {"title": "iPhone"},
                },
                {
                    "label": "Generate image",
                    "call_type": "SELF_MADE",
                    "tool_name": "OPENAI_IMAGE_GENERATION",
                    "payload": {"prompt_text": "iPhone", "output_filename": "iphone.png"},
                    "store_variables": [
                        {
                            "variable_name": "generated_image",
                            "description": "Path of the generated product image",
                        }
                    ],
                },
                {
                    "label": "Expose file",
                    "call_type": "SELF_MADE",
                    "tool_name": "EXPOSE_FILE_ON_URL",
                    "payload": {"file_path": "{generated_image}"},
                    "store_variables": [
                        {"variable_name": "image_url", "description": "Public URL of the image"}
                    ],
                },
                {
                    "label": "Attach image",
                    "call_type": "Composio",
                    "tool_name": "SHOPIFY_CREATE_PRODUCT_IMAGE",
                    "payload": {"image": {"src": "{image_url}"}, "product_id": "{product_id}"},
                },
            ]
        },
    ]
}


def load_example_plan() -> Plan:
    return Plan.model_validate(copy.deepcopy(EXAMPLE_PLAN))
