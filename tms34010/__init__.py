"""TMS34010 graphics processor disassembler."""
