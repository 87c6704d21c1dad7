from dataclasses import dataclass

import torch

# -----------------------------
# Constants
# -----------------------------

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".bmp", ".tiff")

# torchvision ImageNet classifiers usable as embedding model
# name -> (model builder, weights enum member)
MODELS = {
    "mobilenet_v2": ("mobilenet_v2", "MobileNet_V2_Weights.IMAGENET1K_V1"),
    "resnet18": ("resnet18", "ResNet18_Weights.IMAGENET1K_V1"),
    "resnet34": ("resnet34", "ResNet34_Weights.IMAGENET1K_V1"),
}
DEFAULT_MODEL = "mobilenet_v2"

DEVICE = torch.device("cuda" if torch.cuda.is_available() else "cpu")


# -----------------------------
# Run configuration
# -----------------------------

@dataclass
class SortConfig:
    target_dir: str
    class_count: int
    gen_names: bool = True
    model_name: str = DEFAULT_MODEL
    dry_run: bool = False
    verbose: bool = False

    def __str__(self):
        return (
            "Running tensort with options...\n"
            f"  <target_dir>   : {self.target_dir}\n"
            f"  <class_count>  : {self.class_count}\n"
            f"  <gen_names>    : {self.gen_names}\n"
            f"  <model>        : {self.model_name}\n"
            f"  <dry_run>      : {self.dry_run}"
        )
